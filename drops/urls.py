"""Creator drop management routes (v1)."""

from django.urls import path

from .views import (
    DropArchiveView,
    DropDefaultPacksView,
    DropDesignDeleteView,
    DropDesignsView,
    DropDetailView,
    DropListCreateView,
    DropPacksView,
    DropPublishView,
    DropUnpublishView,
)

app_name = "drops"

urlpatterns = [
    path("", DropListCreateView.as_view(), name="drop-list"),
    path("<int:drop_id>/", DropDetailView.as_view(), name="drop-detail"),
    path("<int:drop_id>/designs/", DropDesignsView.as_view(), name="drop-designs"),
    path("<int:drop_id>/designs/<int:drop_design_id>/", DropDesignDeleteView.as_view(), name="drop-design-delete"),
    path("<int:drop_id>/packs/", DropPacksView.as_view(), name="drop-packs"),
    path("<int:drop_id>/default-packs/", DropDefaultPacksView.as_view(), name="drop-default-packs"),
    path("<int:drop_id>/publish/", DropPublishView.as_view(), name="drop-publish"),
    path("<int:drop_id>/unpublish/", DropUnpublishView.as_view(), name="drop-unpublish"),
    path("<int:drop_id>/archive/", DropArchiveView.as_view(), name="drop-archive"),
]
