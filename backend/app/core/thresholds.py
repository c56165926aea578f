"""
Fleet policy thresholds.

Shared by statistics, reports and alert generation so a "due" vehicle means
the same thing everywhere.
"""

from datetime import timedelta

# A vehicle is due for service when its last service is older than this.
SERVICE_INTERVAL = timedelta(days=90)

# Registration / insurance / licence look-ahead used by the stats endpoints.
DOCUMENT_EXPIRY_WINDOW = timedelta(days=30)

# Alert look-ahead windows.
REGISTRATION_ALERT_WINDOW = timedelta(days=30)
INSURANCE_ALERT_WINDOW = timedelta(days=30)
LICENSE_ALERT_WINDOW = timedelta(days=60)

# A trip still in progress this long after its start time is delayed.
TRIP_DELAY_THRESHOLD = timedelta(hours=3)

# How long generated alerts stay relevant.
MAINTENANCE_DUE_ALERT_TTL = timedelta(days=30)
TRIP_DELAY_ALERT_TTL = timedelta(hours=24)
OVERDUE_MAINTENANCE_ALERT_TTL = timedelta(days=7)

# Reports
UPCOMING_MAINTENANCE_WINDOW = timedelta(days=30)
PERFORMANCE_REPORT_PERIOD = timedelta(days=30)
TOP_DRIVERS_LIMIT = 5
