from django.db.models import Q
from django_filters import rest_framework as filters

from .models import Drop


class ShopDropFilterSet(filters.FilterSet):
    store = filters.CharFilter(field_name="creator__store_name", lookup_expr="iexact")
    q = filters.CharFilter(method="filter_q")

    class Meta:
        model = Drop
        fields = ["store"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(Q(title__icontains=value) | Q(description__icontains=value))
