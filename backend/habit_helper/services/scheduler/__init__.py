"""
Scheduler module
Periodic status evaluation, day rollover and session cleanup
"""
from .service import start_scheduler, stop_scheduler
from . import jobs

__all__ = ['start_scheduler', 'stop_scheduler', 'jobs']
