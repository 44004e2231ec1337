import json

from aiohttp import web

from core.method_channel import MethodCall, MethodCallError, MethodChannel, MethodNotImplemented
from services.logging import setup_logging

TAG = __name__


class SimpleHttpServer:
    def __init__(self, config: dict, channel: MethodChannel, alarm_service=None):
        self.config = config
        self.channel = channel
        # When given, the local alarm service's grant and idle switches are
        # exposed under /<channel>/admin.
        self.alarm_service = alarm_service
        self.logger = setup_logging()
        self._runner = None

    def build_app(self) -> web.Application:
        path = f"/{self.channel.name}"
        app = web.Application()
        app.add_routes(
            [
                web.post(path, self.handle_method_call),
                web.get(f"{path}/health", self.handle_health),
            ]
        )
        if self.alarm_service is not None:
            app.add_routes(
                [
                    web.get(f"{path}/admin/alarms", self.handle_list_alarms),
                    web.post(f"{path}/admin/exact_alarms", self.handle_exact_alarms),
                    web.post(f"{path}/admin/idle", self.handle_idle),
                ]
            )
        return app

    async def start(self):
        server_config = self.config.get("server", {})
        host = server_config.get("ip", "0.0.0.0")
        port = int(server_config.get("http_port", 8003))

        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, host, port)
        await site.start()
        self.logger.bind(tag=TAG).info(
            f"Method channel '{self.channel.name}' listening on http://{host}:{port}/{self.channel.name}"
        )

    async def stop(self):
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

    async def _read_json(self, request: web.Request):
        try:
            return await request.json()
        except Exception:
            text = await request.text()
            try:
                return json.loads(text)
            except Exception:
                return None

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"ok": True})

    async def handle_method_call(self, request: web.Request) -> web.Response:
        """Invoke one method on the channel.
        Body JSON:
        {
          "method": "scheduleAlarm",
          "arguments": {"id": 7, "title": "Pay meter", "body": "5 min left", "timestamp": 1700000000000}
        }
        """
        data = await self._read_json(request)
        if data is None:
            return web.json_response({"ok": False, "error": "invalid json"}, status=400)

        if not isinstance(data, dict) or not isinstance(data.get("method"), str):
            return web.json_response({"ok": False, "error": "method is required"}, status=400)

        call = MethodCall(method=data["method"], arguments=data.get("arguments"))
        try:
            result = self.channel.invoke(call)
        except MethodNotImplemented:
            self.logger.bind(tag=TAG).warning(f"Method not implemented: {call.method}")
            return web.json_response({"ok": False, "error": "not implemented"}, status=404)
        except MethodCallError as exc:
            return web.json_response({"ok": False, "error": exc.to_payload()})
        return web.json_response({"ok": True, "result": result})

    async def handle_list_alarms(self, request: web.Request) -> web.Response:
        alarms = [registration.to_payload() for registration in self.alarm_service.pending()]
        return web.json_response(
            {
                "ok": True,
                "alarms": alarms,
                "idle": self.alarm_service.idle,
                "exactAlarmsGranted": self.alarm_service.can_schedule_exact_alarms(),
            }
        )

    async def _read_switch(self, request: web.Request, name: str):
        data = await self._read_json(request)
        if not isinstance(data, dict) or not isinstance(data.get(name), bool):
            return None
        return data[name]

    async def handle_exact_alarms(self, request: web.Request) -> web.Response:
        """Body JSON: {"granted": false}"""
        granted = await self._read_switch(request, "granted")
        if granted is None:
            return web.json_response({"ok": False, "error": "granted must be a boolean"}, status=400)
        if granted:
            self.alarm_service.grant_exact_alarms()
        else:
            self.alarm_service.revoke_exact_alarms()
        self.logger.bind(tag=TAG).info(f"Exact alarm grant set to {granted}")
        return web.json_response({"ok": True, "granted": granted})

    async def handle_idle(self, request: web.Request) -> web.Response:
        """Body JSON: {"idle": true}"""
        idle = await self._read_switch(request, "idle")
        if idle is None:
            return web.json_response({"ok": False, "error": "idle must be a boolean"}, status=400)
        if idle:
            self.alarm_service.enter_idle()
        else:
            self.alarm_service.exit_idle()
        return web.json_response({"ok": True, "idle": idle})
