"""
Colored console logging for the onboarding tutorials.

Every relay call, demo action and tutorial step is printed as a small
"source → destination" block so the developer following the guide can watch
the requests travel between the browser, the tutorial server and Authlete.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from colorama import Fore, Style, init

init(autoreset=True)


class ComponentType(str, Enum):
    """Participants shown in the log output."""
    BROWSER = "BROWSER"
    GUIDE = "GUIDE"
    PAR_TUTORIAL = "PAR-TUTORIAL"
    AUTHLETE = "AUTHLETE"
    SYSTEM = "SYSTEM"


class MessageType(str, Enum):
    """Kinds of log messages."""
    ERROR = "ERROR"
    RELAY_REQUEST = "RELAY-REQUEST"
    RELAY_RESPONSE = "RELAY-RESPONSE"
    DEMO_ACTION = "DEMO-ACTION"
    STEP_CHANGE = "STEP-CHANGE"


class FlowLogger:
    """
    Colored logger for tutorial request flows.

    Messages are printed with a timestamp, a colored source/destination
    header and the sanitized payload, one key per line.
    """

    def __init__(self, component_name: str):
        """
        Initialize a logger for one component.

        Args:
            component_name: Name of the component (GUIDE, PAR-TUTORIAL, ...)
        """
        self.component_name = component_name.upper()
        self.colors = self._get_component_colors()

        self.logger = logging.getLogger(f"onboarding.{component_name.lower()}")
        self.logger.setLevel(logging.INFO)
        self.logger.handlers.clear()

        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        self.logger.addHandler(handler)
        self.logger.propagate = False

    def _get_component_colors(self) -> Dict[str, str]:
        """Color scheme for components and message kinds."""
        return {
            'BROWSER': Fore.BLUE + Style.BRIGHT,
            'GUIDE': Fore.GREEN + Style.BRIGHT,
            'PAR-TUTORIAL': Fore.GREEN + Style.BRIGHT,
            'AUTHLETE': Fore.YELLOW + Style.BRIGHT,
            'SYSTEM': Fore.MAGENTA + Style.BRIGHT,
            'ERROR': Fore.RED + Style.BRIGHT,
            'SUCCESS': Fore.GREEN + Style.BRIGHT,
            'INFO': Fore.CYAN,
            'HEADER': Fore.WHITE + Style.BRIGHT,
            'SEPARATOR': Fore.WHITE + Style.DIM,
            'RESET': Style.RESET_ALL
        }

    def _format_timestamp(self) -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

    def _sanitize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sanitize sensitive data for logging.

        Secrets are redacted; tokens, tickets and codes are cut to their
        first 10 characters.
        """
        sanitized = {}
        for key, value in data.items():
            key_lower = key.lower()

            if key_lower == 'authorization' or any(sensitive in key_lower for sensitive in ['secret', 'password']):
                sanitized[key] = '[REDACTED]'
            elif any(token in key_lower for token in ['token', 'ticket', 'code', 'request_uri', 'requesturi']):
                if isinstance(value, str) and len(value) > 10:
                    sanitized[key] = f"{value[:10]}..."
                else:
                    sanitized[key] = value
            else:
                sanitized[key] = value

        return sanitized

    def log_flow_message(self,
                         source: str,
                         destination: str,
                         message_type: str,
                         data: Dict[str, Any],
                         success: bool = True):
        """
        Print one flow message.

        Args:
            source: Source component name
            destination: Destination component name
            message_type: Message title or MessageType value
            data: Message payload
            success: Whether the operation was successful
        """
        timestamp = self._format_timestamp()
        source_color = self.colors.get(source.upper(), self.colors['INFO'])
        dest_color = self.colors.get(destination.upper(), self.colors['INFO'])

        if not success:
            msg_color = self.colors['ERROR']
        elif message_type in [MessageType.RELAY_RESPONSE, 'SUCCESS']:
            msg_color = self.colors['SUCCESS']
        else:
            msg_color = self.colors['INFO']

        header = f"{self.colors['HEADER']}[{timestamp}] {source_color}{source}{self.colors['RESET']} → {dest_color}{destination}{self.colors['RESET']}"
        print(header)
        print(f"{msg_color}{message_type}:{self.colors['RESET']}")

        for key, value in self._sanitize_data(data).items():
            print(f"  {self.colors['INFO']}{key}:{self.colors['RESET']} {value}")

        print(f"{self.colors['SEPARATOR']}{'-' * 60}{self.colors['RESET']}")
        print()

    def log_relay_request(self, operation: str, path: str, body: Dict[str, Any]):
        """
        Log a request about to be forwarded to Authlete.

        Args:
            operation: Relay operation name (authorization, token, ...)
            path: Provider path the body is sent to
            body: Forwarded body
        """
        request_data = {"operation": operation, "path": path}
        request_data.update(body)

        self.log_flow_message(
            source=self.component_name,
            destination=ComponentType.AUTHLETE.value,
            message_type=MessageType.RELAY_REQUEST.value,
            data=request_data
        )

    def log_relay_response(self, operation: str, status_code: int, body: Any):
        """
        Log the provider response relayed back to the browser.

        Args:
            operation: Relay operation name
            status_code: Provider HTTP status
            body: Parsed JSON body or raw text
        """
        response_data: Dict[str, Any] = {"operation": operation, "status_code": status_code}
        if isinstance(body, dict):
            for key in ("action", "resultCode", "resultMessage"):
                if key in body:
                    response_data[key] = body[key]
        else:
            response_data["raw_length"] = len(str(body))

        self.log_flow_message(
            source=ComponentType.AUTHLETE.value,
            destination=self.component_name,
            message_type=MessageType.RELAY_RESPONSE.value,
            data=response_data,
            success=status_code < 400
        )

    def log_demo_action(self, action: str, details: Dict[str, Any], success: bool = True):
        """
        Log a demo button press handled on the server.

        Args:
            action: Demo action (authorization, consent, token, introspection)
            details: Captured values and outcome
            success: Whether the action produced the expected response
        """
        action_data = {"action": action}
        action_data.update(details)

        self.log_flow_message(
            source=ComponentType.BROWSER.value,
            destination=self.component_name,
            message_type=MessageType.DEMO_ACTION.value,
            data=action_data,
            success=success
        )

    def log_step_change(self, step_id: int, source: str = ComponentType.BROWSER.value):
        """Log a move to another tutorial step."""
        self.log_flow_message(
            source=source,
            destination=self.component_name,
            message_type=MessageType.STEP_CHANGE.value,
            data={"current_step": step_id}
        )

    def log_error(self,
                  error_type: str,
                  message: str,
                  details: Optional[Dict[str, Any]] = None):
        """
        Log error messages with context.

        Args:
            error_type: Type of error
            message: Error message
            details: Additional error context
        """
        error_data = {
            "error_type": error_type,
            "message": message
        }

        if details:
            error_data.update(details)

        self.log_flow_message(
            source=self.component_name,
            destination="ERROR-HANDLER",
            message_type=MessageType.ERROR.value,
            data=error_data,
            success=False
        )

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Log a one-line informational message with optional details."""
        print(f"{self.colors['INFO']}[{self._format_timestamp()}] {self.component_name}: {message}{self.colors['RESET']}")
        if details:
            for key, value in self._sanitize_data(details).items():
                print(f"  {key}: {value}")
        print()

    def log_startup(self, port: int, additional_info: Optional[Dict[str, Any]] = None):
        """
        Log component startup information.

        Args:
            port: Port the component listens on
            additional_info: Extra lines to print under the banner
        """
        print(f"{self.colors['SUCCESS']}🚀 {self.component_name} running on http://localhost:{port}{self.colors['RESET']}")
        if additional_info:
            for key, value in additional_info.items():
                print(f"   {key}: {value}")
        print(f"{self.colors['SEPARATOR']}{'-' * 60}{self.colors['RESET']}")
        print()


def create_logger(component_name: str) -> FlowLogger:
    """Factory for FlowLogger instances."""
    return FlowLogger(component_name)
