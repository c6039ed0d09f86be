from django.urls import path
from .views import ReportExportView, ReportView, TodayStatsView

app_name = "reports"

urlpatterns = [
    path("", ReportView.as_view(), name="report"),
    path("today/", TodayStatsView.as_view(), name="report-today"),
    path("export/", ReportExportView.as_view(), name="report-export"),
]
