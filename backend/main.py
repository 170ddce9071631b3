# backend/main.py
"""
Cloud Functions entry points.

- api: every Flask route (callables, dashboards, health) behind one HTTPS function
- reset_daily_merchant_revenue: daily counter reset at 00:00 Asia/Kuala_Lumpur

Deployed functions always use the Firestore document store and Firebase ID
tokens.
"""

from firebase_functions import https_fn, options, scheduler_fn

from bazaar import create_app
from bazaar.config import Config
from bazaar.services import maintenance_service

options.set_global_options(region=Config.FUNCTIONS_REGION)

app = create_app({
    "DOCUMENT_BACKEND": "firestore",
    "AUTH_BACKEND": "firebase",
})


@https_fn.on_request()
def api(req: https_fn.Request) -> https_fn.Response:
    with app.request_context(req.environ):
        return app.full_dispatch_request()


@scheduler_fn.on_schedule(
    schedule=Config.RESET_SCHEDULE,
    timezone=scheduler_fn.Timezone(Config.RESET_TIMEZONE),
)
def reset_daily_merchant_revenue(event: scheduler_fn.ScheduledEvent) -> None:
    with app.app_context():
        summary = maintenance_service.reset_daily_revenue()
        app.logger.info("Scheduled reset done: %s", summary)
