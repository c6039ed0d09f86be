from django.http import HttpResponse
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import IsManagerOrHigher
from .exports import ExportService
from .serializers import ReportQuerySerializer, ReportSerializer, TodayStatsSerializer
from .services import ReportService

CONTENT_TYPES = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _report_for(request):
    query = ReportQuerySerializer(data=request.query_params, context={"request": request})
    query.is_valid(raise_exception=True)
    data = query.validated_data
    return data, ReportService.get_report_data(data["start"], data["end"], data.get("branch"))


class ReportView(APIView):
    """GET /api/reports/?period=&start=&end=&branch="""

    permission_classes = [IsManagerOrHigher]

    def get(self, request, *args, **kwargs):
        _, report = _report_for(request)
        return Response(ReportSerializer(report).data)


class TodayStatsView(APIView):
    permission_classes = [IsManagerOrHigher]

    def get(self, request, *args, **kwargs):
        return Response(TodayStatsSerializer(ReportService.today_stats()).data)


class ReportExportView(APIView):
    """GET /api/reports/export/?format=csv|xlsx plus the report filters."""

    permission_classes = [IsManagerOrHigher]

    def perform_content_negotiation(self, request, force=False):
        # ?format= names the file type here, not a DRF renderer
        return super().perform_content_negotiation(request, force=True)

    def get(self, request, *args, **kwargs):
        query, report = _report_for(request)
        format_type = query["format"]
        if format_type == "xlsx":
            file_data = ExportService.export_to_xlsx(report)
        else:
            file_data = ExportService.export_to_csv(report)

        filename = f"sales-report-{report['start']}-to-{report['end']}.{format_type}"
        response = HttpResponse(file_data, content_type=CONTENT_TYPES[format_type])
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response
