from django.core.management.base import BaseCommand
from fulfillment.services import FulfillmentError, submit_order
from orders.selectors import list_failed_fulfillment_orders


class Command(BaseCommand):
    help = "Resubmit every order whose Printify fulfillment failed"

    def handle(self, *args, **options):
        done = failed = 0
        for order in list_failed_fulfillment_orders():
            try:
                submit_order(order)
                done += 1
            except FulfillmentError as exc:
                failed += 1
                self.stderr.write(f"{order.number}: {exc}")
        self.stdout.write(self.style.SUCCESS(f"Resubmitted {done} order(s); {failed} still failing."))
