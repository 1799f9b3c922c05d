from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from tasks.overdue_tasks import run_overdue_sweep

scheduler = BackgroundScheduler()

# Schedule to run every day at 11:00 PM IST
scheduler.add_job(run_overdue_sweep, CronTrigger(hour=23, minute=0, timezone='Asia/Kolkata'), id='overdue_sweep_job')
