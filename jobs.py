# jobs.py
"""
Scheduled jobs, run from cron or a container scheduler:

     python jobs.py generate-invoices   # next month's rent invoices
     python jobs.py mark-overdue        # sent/viewed invoices past due -> overdue
     python jobs.py init-db             # create tables without Alembic (development)
"""
import argparse
import logging
import sys

import config
from database import get_session_context, init_db
from services.invoice_service import InvoiceService

logger = logging.getLogger("jobs")


def generate_invoices() -> int:
     with get_session_context() as db:
          invoices = InvoiceService.generate_monthly_invoices(db)
          return len(invoices)


def mark_overdue() -> int:
     with get_session_context() as db:
          return InvoiceService.mark_overdue_invoices(db)


def create_tables() -> int:
     init_db()
     return 0


JOBS = {
     "generate-invoices": generate_invoices,
     "mark-overdue": mark_overdue,
     "init-db": create_tables,
}


def main(argv=None) -> int:
     parser = argparse.ArgumentParser(description="RentEase scheduled jobs")
     parser.add_argument("job", choices=sorted(JOBS))
     args = parser.parse_args(argv)

     config.setup_logging()
     try:
          count = JOBS[args.job]()
     except Exception:
          logger.exception("Job %s failed", args.job)
          return 1
     logger.info("Job %s finished: %s records", args.job, count)
     return 0


if __name__ == "__main__":
     sys.exit(main())
