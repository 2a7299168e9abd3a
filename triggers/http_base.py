"""
HTTP Trigger Base Class.

Abstract base class for all Azure Functions HTTP triggers providing consistent
request/response handling.

Error mapping:
    ValueError, ClientError          -> 400
    PermissionError                  -> 403
    FileNotFoundError                -> 404
    FeedHandlerNotRegisteredError    -> 404
    method not in allowed methods    -> 405
    anything else                    -> 500

Exports:
    BaseHttpTrigger: Base class for HTTP triggers
    SystemMonitoringTrigger: Base class for monitoring
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Tuple, Union
import asyncio
import json
import traceback
import uuid
from datetime import datetime, timezone

import azure.functions as func
from exceptions import ClientError, FeedHandlerNotRegisteredError
from util_logger import LoggerFactory, ComponentType


ResponseData = Union[Dict[str, Any], Tuple[Dict[str, Any], int]]


class BaseHttpTrigger(ABC):
    """
    Abstract base class for Azure Functions HTTP triggers.
    """

    def __init__(self, trigger_name: str):
        """
        Args:
            trigger_name: Name of the trigger for logging (e.g., "feeds", "livez")
        """
        self.trigger_name = trigger_name
        self.logger = LoggerFactory.create_logger(ComponentType.TRIGGER, f"HttpTrigger.{trigger_name}")

    # ========================================================================
    # ABSTRACT METHODS - Must be implemented by concrete triggers
    # ========================================================================

    @abstractmethod
    def process_request(self, req: func.HttpRequest) -> ResponseData:
        """
        Process the HTTP request and return response data.

        Returns:
            Dict serialized as a 200 JSON response, or (dict, status_code)
            when the outcome carries its own status

        Raises:
            ValueError / ClientError: Client errors (400)
            PermissionError: Authorization errors (403)
            FileNotFoundError / FeedHandlerNotRegisteredError: Not found (404)
            Exception: Internal server errors (500)
        """
        pass

    @abstractmethod
    def get_allowed_methods(self) -> List[str]:
        pass

    # ========================================================================
    # CONCRETE INFRASTRUCTURE METHODS
    # ========================================================================

    async def handle_request_async(self, req: func.HttpRequest) -> func.HttpResponse:
        """
        Run handle_request on the default executor so blocking intake and
        storage work stays off the event loop.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.handle_request, req)

    def handle_request(self, req: func.HttpRequest) -> func.HttpResponse:
        """
        Main entry point for HTTP request handling.
        """
        request_id = self._generate_request_id()

        self.logger.info(
            f"🌐 [{self.trigger_name}] Request {request_id} started: "
            f"{req.method} {req.url}"
        )

        try:
            if req.method not in self.get_allowed_methods():
                return self._create_error_response(
                    error="Method not allowed",
                    message=f"Method {req.method} not allowed. Allowed: {', '.join(self.get_allowed_methods())}",
                    status_code=405,
                    request_id=request_id
                )

            response_data = self.process_request(req)
            status_code = 200
            if isinstance(response_data, tuple):
                response_data, status_code = response_data

            response = self._create_success_response(response_data, request_id, status_code)

            self.logger.info(
                f"✅ [{self.trigger_name}] Request {request_id} completed with {status_code}"
            )
            return response

        except (ValueError, ClientError) as e:
            self.logger.warning(f"❌ [{self.trigger_name}] Client error: {e}")
            return self._create_error_response(
                error="Bad request",
                message=str(e),
                status_code=400,
                request_id=request_id
            )

        except PermissionError as e:
            self.logger.warning(f"🚫 [{self.trigger_name}] Permission denied: {e}")
            return self._create_error_response(
                error="Forbidden",
                message=str(e),
                status_code=403,
                request_id=request_id
            )

        except (FileNotFoundError, FeedHandlerNotRegisteredError) as e:
            self.logger.info(f"🔍 [{self.trigger_name}] Not found: {e}")
            return self._create_error_response(
                error="Not found",
                message=str(e),
                status_code=404,
                request_id=request_id
            )

        except Exception as e:
            self.logger.error(f"💥 [{self.trigger_name}] Internal error: {e}")
            self.logger.debug(f"📍 Full traceback: {traceback.format_exc()}")
            return self._create_error_response(
                error="Internal server error",
                message=str(e),
                status_code=500,
                request_id=request_id,
                include_debug_info=True
            )

    # ========================================================================
    # UTILITY METHODS FOR SUBCLASSES
    # ========================================================================

    def extract_path_params(self, req: func.HttpRequest, required_params: List[str]) -> Dict[str, str]:
        """
        Raises:
            ValueError: If required parameters are missing
        """
        params = {}
        missing_params = []

        for param_name in required_params:
            value = req.route_params.get(param_name)
            if not value:
                missing_params.append(param_name)
            else:
                params[param_name] = value

        if missing_params:
            raise ValueError(f"Missing required path parameters: {', '.join(missing_params)}")

        return params

    def extract_query_params(self, req: func.HttpRequest,
                             required_params: List[str] = None,
                             optional_params: List[str] = None) -> Dict[str, str]:
        """
        Raises:
            ClientError: If required parameters are missing
        """
        params = {}
        missing_params = []

        for param_name in required_params or []:
            value = req.params.get(param_name)
            if not value:
                missing_params.append(param_name)
            else:
                params[param_name] = value

        for param_name in optional_params or []:
            value = req.params.get(param_name)
            if value:
                params[param_name] = value

        if missing_params:
            raise ClientError(f"Missing required query parameters: {', '.join(missing_params)}")

        return params

    # ========================================================================
    # PRIVATE INFRASTRUCTURE METHODS
    # ========================================================================

    def _generate_request_id(self) -> str:
        return str(uuid.uuid4())[:8]

    def _create_success_response(self, data: Dict[str, Any], request_id: str,
                                 status_code: int = 200) -> func.HttpResponse:
        response_data = {
            **data,
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        return func.HttpResponse(
            json.dumps(response_data, default=str),
            status_code=status_code,
            mimetype="application/json",
            headers={"X-Request-ID": request_id}
        )

    def _create_error_response(self, error: str, message: str, status_code: int,
                               request_id: str, include_debug_info: bool = False) -> func.HttpResponse:
        response_data = {
            "error": error,
            "message": message,
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        if include_debug_info:
            response_data["debug"] = {
                "trigger_name": self.trigger_name,
                "python_version": __import__("sys").version.split()[0]
            }

        return func.HttpResponse(
            json.dumps(response_data),
            status_code=status_code,
            mimetype="application/json",
            headers={"X-Request-ID": request_id}
        )


class SystemMonitoringTrigger(BaseHttpTrigger):
    """Base class for system monitoring triggers (liveness, diagnostics)."""

    def get_system_timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat()
