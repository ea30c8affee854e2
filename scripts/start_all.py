#!/usr/bin/env python3
"""
Startup Script for the Authlete Onboarding Tutorials

Launches the onboarding guide and the PAR tutorial side by side, waits for
both to answer their health checks, and stops them together on Ctrl+C.
"""

import signal
import socket
import subprocess
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, List

import httpx

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.shared.config import get_settings
from src.shared.logging_utils import FlowLogger


class ServerManager:
    """Runs both tutorial servers as uvicorn subprocesses"""

    def __init__(self):
        settings = get_settings()
        self.logger = FlowLogger("SYSTEM")
        self.processes: List[subprocess.Popen] = []
        self.servers = [
            {
                "name": "Onboarding Guide",
                "module": "src.guide.main:app",
                "port": settings.port,
                "process": None
            },
            {
                "name": "PAR Tutorial",
                "module": "src.par_tutorial.main:app",
                "port": settings.par_port,
                "process": None
            }
        ]
        for server in self.servers:
            server["health_url"] = f"http://localhost:{server['port']}/health"

        self.shutdown_requested = False

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        self.logger.log_flow_message(
            "SYSTEM", "SYSTEM",
            "Shutdown Signal Received",
            {"signal": signum, "timestamp": datetime.now().isoformat()}
        )
        self.shutdown_requested = True
        self.stop_all_servers()
        sys.exit(0)

    @staticmethod
    def check_port_available(port: int) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            return sock.connect_ex(("localhost", port)) != 0

    def wait_for_health_check(self, server: Dict, timeout: int = 30) -> bool:
        """Poll the server's /health endpoint until it answers 200."""
        start_time = time.time()

        while time.time() - start_time < timeout:
            try:
                with httpx.Client() as client:
                    response = client.get(server["health_url"], timeout=2)
                if response.status_code == 200:
                    self.logger.log_flow_message(
                        "SYSTEM", server["name"].upper().replace(" ", "-"),
                        "Health Check Passed",
                        {
                            "url": server["health_url"],
                            "response_time": f"{time.time() - start_time:.2f}s"
                        }
                    )
                    return True
            except httpx.HTTPError:
                pass

            time.sleep(1)

        return False

    def start_server(self, server: Dict) -> bool:
        if not self.check_port_available(server["port"]):
            self.logger.log_error(
                "port_in_use",
                f"Port {server['port']} is already in use",
                {"server": server["name"]}
            )
            return False

        self.logger.log_flow_message(
            "SYSTEM", server["name"].upper().replace(" ", "-"),
            "Starting Server",
            {"module": server["module"], "port": server["port"]}
        )

        try:
            process = subprocess.Popen([
                sys.executable, "-m", "uvicorn",
                server["module"],
                "--host", "0.0.0.0",
                "--port", str(server["port"]),
                "--log-level", "info"
            ])
        except OSError as e:
            self.logger.log_error("server_start_failed", str(e), {"server": server["name"]})
            return False

        server["process"] = process
        self.processes.append(process)

        if self.wait_for_health_check(server):
            return True

        self.logger.log_error(
            "health_check_failed",
            f"{server['name']} did not become healthy within 30s",
            {"port": server["port"]}
        )
        process.terminate()
        return False

    def start_all_servers(self) -> bool:
        print("\n" + "=" * 60)
        print("🚀 Authlete Onboarding Tutorials")
        print("=" * 60)

        for server in self.servers:
            if self.shutdown_requested:
                return False

            print(f"📡 Starting {server['name']} on port {server['port']}...")
            if not self.start_server(server):
                print(f"❌ Failed to start {server['name']}")
                self.stop_all_servers()
                return False
            print(f"✅ {server['name']} started")

        print()
        for server in self.servers:
            print(f"  {server['name']}: http://localhost:{server['port']}")
        print()
        print("⚠️  Press Ctrl+C to stop all servers")
        print("=" * 60)
        return True

    def stop_all_servers(self):
        if not self.processes:
            return

        print("\n🛑 Stopping all servers...")

        for process in self.processes:
            if process.poll() is not None:
                continue
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()

        self.processes.clear()
        for server in self.servers:
            server["process"] = None

        self.logger.log_flow_message(
            "SYSTEM", "SYSTEM",
            "Shutdown Complete",
            {"timestamp": datetime.now().isoformat()}
        )

    def run(self):
        try:
            if not self.start_all_servers():
                sys.exit(1)

            while not self.shutdown_requested:
                time.sleep(1)
                for server in self.servers:
                    process = server["process"]
                    if process and process.poll() is not None:
                        self.logger.log_error(
                            "server_exited",
                            f"{server['name']} stopped unexpectedly",
                            {"exit_code": process.returncode}
                        )
                        self.shutdown_requested = True
        finally:
            self.stop_all_servers()


def main():
    if not Path("src").exists():
        print("❌ Error: This script must be run from the project root directory")
        sys.exit(1)

    ServerManager().run()


if __name__ == "__main__":
    main()
