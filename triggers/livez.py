"""
Lightweight Liveness Check HTTP Trigger.

Confirms the Function App process is running. Touches no feed, storage or
network dependency: if this endpoint responds, the app is alive.

Exports:
    LivenessCheckTrigger: Liveness check trigger class
    livez_trigger: Singleton trigger instance
"""

from typing import Dict, Any, List
import azure.functions as func
from .http_base import SystemMonitoringTrigger


class LivenessCheckTrigger(SystemMonitoringTrigger):

    def __init__(self):
        super().__init__("livez")

    def get_allowed_methods(self) -> List[str]:
        return ["GET"]

    def process_request(self, req: func.HttpRequest) -> Dict[str, Any]:
        return {
            "status": "alive",
            "checked_at": self.get_system_timestamp()
        }


livez_trigger = LivenessCheckTrigger()
