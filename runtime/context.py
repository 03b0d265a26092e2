"""AppContext: the runtime's shared objects, built once at process start.

Owns:
- LogStore + LogUpdateNotifier
- CommandRegistry (with the default "get-logs" and "print-summary" commands)
- PrintPipeline (and the ExecutableLocator it uses)

Lifecycle:

    context = AppContext.from_settings(settings, sink=broadcaster)
    context.start()      # subscribe notifier, register commands
    ...
    context.shutdown()   # unregister commands, cancel pending signals
"""

from __future__ import annotations

from typing import Any, List, Optional

from configs.settings import Settings
from core.locator.executable_locator import ExecutableLocator, default_candidate_dirs
from core.printing.pipeline import PrintPipeline
from core.printing import summary

from .notifications import NotificationSink, RecordingSink
from .registry.command_registry import CommandRegistry
from .store.log_notifier import LogUpdateNotifier
from .store.log_store import MAX_RECENT_LOGS, LogStore


GET_LOGS_CHANNEL = "get-logs"
PRINT_SUMMARY_CHANNEL = "print-summary"


class AppContext:
    def __init__(
        self,
        log_store: LogStore,
        registry: CommandRegistry,
        notifier: LogUpdateNotifier,
        pipeline: PrintPipeline,
    ) -> None:
        self.log_store = log_store
        self.registry = registry
        self.notifier = notifier
        self.pipeline = pipeline
        self.started = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        sink: Optional[NotificationSink] = None,
        **pipeline_overrides: Any,
    ) -> "AppContext":
        """Wire up the default runtime from settings.

        `pipeline_overrides` are passed to PrintPipeline (e.g. a fake
        renderer or invoker in tests).
        """
        sink = sink if sink is not None else RecordingSink()
        log_store = LogStore(log_dir=str(settings.log_dir), env=settings.env)

        locator = ExecutableLocator(tool_name=settings.tool_name, log_store=log_store)
        pipeline_kwargs = dict(
            log_store=log_store,
            locator=locator,
            candidate_dirs=lambda: default_candidate_dirs(settings),
            temp_dir=settings.temp_dir,
            default_printer=settings.printer,
        )
        pipeline_kwargs.update(pipeline_overrides)

        return cls(
            log_store=log_store,
            registry=CommandRegistry(log_store, sink=sink),
            notifier=LogUpdateNotifier(log_store, sink),
            pipeline=PrintPipeline(**pipeline_kwargs),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.started:
            return
        self.notifier.start()
        self.register_default_commands()
        self.started = True
        self.log_store.info("PrintDesk runtime started")

    def shutdown(self) -> None:
        if not self.started:
            return
        self.registry.unregister_all()
        self.notifier.stop()
        self.started = False

    # ------------------------------------------------------------------
    # Default commands
    # ------------------------------------------------------------------

    def register_default_commands(self) -> None:
        self.registry.register(GET_LOGS_CHANNEL, self.handle_get_logs, log_requests=False)
        self.registry.register(PRINT_SUMMARY_CHANNEL, self.handle_print_summary)

    async def handle_get_logs(self, args: Any = None) -> List[dict]:
        limit = MAX_RECENT_LOGS
        if isinstance(args, dict) and args.get("limit") is not None:
            limit = max(0, int(args["limit"]))
        return [
            entry.model_dump(mode="json")
            for entry in self.log_store.get_recent_logs(limit)
        ]

    async def handle_print_summary(self, args: Any = None) -> dict:
        return await summary.print_summary(self.pipeline, args)
