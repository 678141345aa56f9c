"""Inventory ledger views: movement list/create, detail, report and statistics.

All endpoints are restricted to staff users.
"""

from django.http import Http404
from django_filters import rest_framework as filters
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view, inline_serializer
from rest_framework import filters as drf_filters
from rest_framework import generics, permissions, status
from rest_framework import serializers as rf_serializers
from rest_framework.response import Response
from rest_framework.views import APIView

from . import reports, selectors
from .exceptions import MovementError, TargetNotFound
from .models import LedgerEntry
from .serializers import (
    LedgerEntrySerializer,
    MovementCreateSerializer,
    ReportQuerySerializer,
    StatisticsQuerySerializer,
)

ErrorSerializer = inline_serializer(
    name="MovementError",
    fields={"detail": rf_serializers.CharField(), "code": rf_serializers.CharField()},
)


class LedgerEntryFilterSet(filters.FilterSet):
    product = filters.NumberFilter(field_name="product_id")
    variant = filters.NumberFilter(field_name="variant_id")
    actor = filters.NumberFilter(field_name="actor_id")
    kind = filters.ChoiceFilter(field_name="kind", choices=LedgerEntry.KIND_CHOICES)
    created_from = filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    created_to = filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = LedgerEntry
        fields = ["product", "variant", "actor", "kind", "created_from", "created_to"]


def _money(value) -> str:
    return f"{value:.2f}"


def _summary_body(summary: dict) -> dict:
    return {
        "total_movements": summary["total_movements"],
        "by_kind": {
            kind: {"count": row["count"], "signed_total": _money(row["signed_total"]), "units": _money(row["units"])}
            for kind, row in summary["by_kind"].items()
        },
    }


def _ranking_body(rows: list[dict]) -> list[dict]:
    return [{**row, "total_quantity": _money(row["total_quantity"])} for row in rows]


class InventoryBaseView:
    permission_classes = [permissions.IsAdminUser]
    throttle_scope = "inventory"


@extend_schema_view(
    get=extend_schema(
        tags=["Inventory Endpoints"],
        summary="List ledger entries",
        description=(
            "Ledger entries, newest first. Filters: product, variant, kind, actor, created_from and created_to "
            "(ISO dates, inclusive). Ordering by `created_at` or `signed_quantity`."
        ),
    ),
)
class MovementListCreateView(InventoryBaseView, generics.ListCreateAPIView):
    serializer_class = LedgerEntrySerializer
    filterset_class = LedgerEntryFilterSet
    filter_backends = [filters.DjangoFilterBackend, drf_filters.OrderingFilter]
    ordering_fields = ["created_at", "signed_quantity"]
    ordering = ["-created_at", "-id"]

    def get_queryset(self):
        return selectors.ledger_entries()

    def get_throttles(self):
        self.throttle_scope = "inventory_write" if self.request.method == "POST" else "inventory"
        return super().get_throttles()

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Record a stock movement",
        description=(
            "Applies an inflow, outflow, adjustment, reserve or release to a product or variant and appends it "
            "to the ledger. For adjustments `quantity` is the new absolute stock."
        ),
        request=MovementCreateSerializer,
        responses={201: LedgerEntrySerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        examples=[
            OpenApiExample(
                "Outflow",
                value={"product_id": 1, "kind": "outflow", "quantity": "2.00", "reason": "Damaged in storage"},
                request_only=True,
            ),
            OpenApiExample(
                "Insufficient stock",
                value={"detail": "Insufficient stock. Current stock: 10.00", "code": "insufficient_stock"},
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request, *args, **kwargs):
        serializer = MovementCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        try:
            entry = serializer.save()
        except Http404:
            return Response({"detail": "Not found.", "code": TargetNotFound.code}, status=status.HTTP_404_NOT_FOUND)
        except MovementError as exc:
            return Response({"detail": str(exc), "code": exc.code}, status=status.HTTP_400_BAD_REQUEST)
        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    get=extend_schema(tags=["Inventory Endpoints"], summary="Get ledger entry"),
)
class MovementDetailView(InventoryBaseView, generics.RetrieveAPIView):
    serializer_class = LedgerEntrySerializer

    def get_queryset(self):
        return selectors.ledger_entries()


class InventoryReportView(InventoryBaseView, APIView):
    """Ledger summary for a date window."""

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Ledger report",
        description="Counts and signed totals per movement kind between two dates (inclusive).",
        parameters=[
            OpenApiParameter("start", OpenApiTypes.DATE, location="query", required=True),
            OpenApiParameter("end", OpenApiTypes.DATE, location="query", required=True),
            OpenApiParameter("product", OpenApiTypes.INT, location="query"),
            OpenApiParameter("variant", OpenApiTypes.INT, location="query"),
            OpenApiParameter("kind", OpenApiTypes.STR, location="query"),
            OpenApiParameter("actor", OpenApiTypes.INT, location="query"),
            OpenApiParameter("include_entries", OpenApiTypes.BOOL, location="query"),
        ],
        examples=[
            OpenApiExample(
                "Report",
                value={
                    "start": "2025-01-01",
                    "end": "2025-01-31",
                    "total_movements": 2,
                    "by_kind": {"inflow": {"count": 1, "signed_total": "10.00", "units": "10.00"}},
                },
                response_only=True,
            )
        ],
    )
    def get(self, request):
        query = ReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        entries = list(
            selectors.entries_between(
                params["start"],
                params["end"],
                product_id=params.get("product"),
                variant_id=params.get("variant"),
                kind=params.get("kind"),
                actor_id=params.get("actor"),
            )
        )
        body = {"start": params["start"], "end": params["end"], **_summary_body(reports.summarize(entries))}
        if params["include_entries"]:
            body["entries"] = LedgerEntrySerializer(entries, many=True).data
        return Response(body, status=status.HTTP_200_OK)


class InventoryStatisticsView(InventoryBaseView, APIView):
    """Recent ledger activity with top products and actors."""

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Ledger statistics",
        parameters=[
            OpenApiParameter("days", OpenApiTypes.INT, location="query", description="Window size, default 30"),
            OpenApiParameter("product", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query", description="Rows per ranking"),
        ],
    )
    def get(self, request):
        query = StatisticsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        entries = list(selectors.recent_entries(params["days"], product_id=params.get("product")))
        return Response(
            {
                "days": params["days"],
                **_summary_body(reports.summarize(entries)),
                "top_products": _ranking_body(
                    reports.top_entities(entries, by=reports.TOP_BY_PRODUCT, limit=params["limit"])
                ),
                "top_actors": _ranking_body(
                    reports.top_entities(entries, by=reports.TOP_BY_ACTOR, limit=params["limit"])
                ),
            },
            status=status.HTTP_200_OK,
        )


# EOF
