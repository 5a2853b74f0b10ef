"""
Side effects of the signup workflow come in three strengths:

* required: failure fails the request (confirmation emails, since the user
  has no other way to confirm)
* best-effort: runs inline, failure is logged (welcome and admin emails)
* fire-and-forget: runs after the response when a background queue is
  available, failure is logged (webhooks)
"""

import logging
from typing import Optional
from fastapi import BackgroundTasks

logger = logging.getLogger(__name__)


class Dispatcher:

    def __init__(self, background: Optional[BackgroundTasks] = None):
        self.background = background

    def required(self, action, *args, **kwargs):
        return action(*args, **kwargs)

    def best_effort(self, action, *args, **kwargs):
        try:
            return action(*args, **kwargs)
        except Exception as e:
            logger.error(f"[Dispatch] {getattr(action, '__name__', action)} failed: {e}")
            return None

    def fire_and_forget(self, action, *args, **kwargs):
        if self.background is None:
            self.best_effort(action, *args, **kwargs)
        else:
            self.background.add_task(self.best_effort, action, *args, **kwargs)
