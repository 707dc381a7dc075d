from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from coachnudge.config import load_settings
from coachnudge.context import NudgeContext, build_context
from coachnudge.nudges.reconciler import handle_interaction
from coachnudge.nudges.scheduler import run_scheduler
from coachnudge.utils.logging import log


def default_context_factory() -> NudgeContext:
    return build_context(load_settings())


def create_app(context_factory: Optional[Callable[[], NudgeContext]] = None) -> FastAPI:
    """
    HTTP surface: the scheduler trigger and the Slack interactivity callback.
    context_factory builds a fresh NudgeContext for every request.
    """
    make_context = context_factory or default_context_factory
    app = FastAPI(title="Coaching Nudges")

    @app.get("/health")
    def health():
        return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}

    # GET for the periodic trigger, POST for a manual run
    @app.api_route("/nudge-scheduler", methods=["GET", "POST"])
    def nudge_scheduler():
        try:
            ctx = make_context()
        except Exception as e:
            log("Server", f"Could not build scheduler context: {e}", "ERROR")
            return JSONResponse({"error": "Scheduler failed", "details": str(e)}, status_code=500)

        report = run_scheduler(ctx)
        return JSONResponse(report.to_dict(), status_code=200 if report.success else 500)

    @app.post("/slack/interactions")
    async def slack_interactions(request: Request):
        body = await request.body()
        headers = dict(request.headers)

        def handle():
            return handle_interaction(make_context(), body, headers)

        status, content = await run_in_threadpool(handle)
        if isinstance(content, dict):
            return JSONResponse(content, status_code=status)
        return Response(content=content, status_code=status, media_type="text/plain")

    return app
