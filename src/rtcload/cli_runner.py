# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import contextlib
import importlib
import logging
import signal
from typing import TYPE_CHECKING

from rich.console import Console

from rtcload.common.config import LOOPBACK_SESSION_FACTORY, LoadTestConfig
from rtcload.common.exceptions import AdmissionCancelled, SetupError, SuiteCaseError
from rtcload.common.logging import setup_rich_logging

if TYPE_CHECKING:
    from rtcload.orchestrator.models import LoadTestResult
    from rtcload.session.protocols import SessionFactory

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def load_session_factory(config: LoadTestConfig) -> "SessionFactory":
    """Resolve ``config.session_factory`` to a callable producing sessions.

    Raises:
        SetupError: If the import path cannot be resolved to a callable
    """
    if config.session_factory == LOOPBACK_SESSION_FACTORY:
        from rtcload.session.loopback import LoopbackServer, LoopbackSessionFactory

        return LoopbackSessionFactory(
            LoopbackServer(
                drop_rate=config.loopback_drop_rate,
                connect_failure_rate=config.loopback_failure_rate,
            )
        )

    module_name, sep, attr = config.session_factory.partition(":")
    if not sep or not module_name or not attr:
        raise SetupError(
            f"Invalid session factory {config.session_factory!r}, "
            "expected 'loopback' or 'module:attribute'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SetupError(f"Could not import session factory module {module_name!r}: {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise SetupError(f"{config.session_factory!r} is not a callable session factory")
    return factory


def _install_signal_handlers(cancel_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # add_signal_handler is unavailable on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, cancel_event.set)


async def _export_json(config: LoadTestConfig, result: "LoadTestResult") -> None:
    if config.output_json is None:
        return
    from rtcload.exporters.json_exporter import JsonReportExporter

    await JsonReportExporter(result, config.output_json).export()


def run_load_test(config: LoadTestConfig, console: Console | None = None) -> int:
    """Run a single load test and print its report.

    Returns:
        The process exit code
    """
    setup_rich_logging(config.log_level)
    console = console or Console()
    logger.info("Starting rtcload")

    try:
        return asyncio.run(_run_load_test(config, console))
    except SetupError as e:
        logger.error(f"Setup failed: {e}")
        return EXIT_FAILURE


async def _run_load_test(config: LoadTestConfig, console: Console) -> int:
    from rtcload.exporters.console_exporter import ConsoleReportExporter
    from rtcload.orchestrator.orchestrator import LoadTestOrchestrator

    cancel_event = asyncio.Event()
    _install_signal_handlers(cancel_event)
    reporter = ConsoleReportExporter(console)
    orchestrator = LoadTestOrchestrator(
        session_factory=load_session_factory(config), reporter=reporter
    )

    try:
        result = await orchestrator.run(config.to_run_parameters(), cancel_event)
    except AdmissionCancelled as e:
        logger.warning(f"Load test cancelled while admitting participants ({len(e.runs)} joined)")
        if e.result is not None:
            reporter.export(e.result)
            await _export_json(config, e.result)
        return EXIT_CANCELLED

    await _export_json(config, result)
    return EXIT_OK


def run_suite(config: LoadTestConfig, console: Console | None = None) -> int:
    """Run the fixed comparison matrix and print one row per case.

    Returns:
        The process exit code
    """
    setup_rich_logging(config.log_level)
    console = console or Console()
    logger.info("Starting rtcload suite")

    try:
        return asyncio.run(_run_suite(config, console))
    except SetupError as e:
        logger.error(f"Setup failed: {e}")
        return EXIT_FAILURE


async def _run_suite(config: LoadTestConfig, console: Console) -> int:
    from rtcload.exporters.suite_exporter import SuiteTableExporter
    from rtcload.orchestrator.orchestrator import LoadTestOrchestrator
    from rtcload.orchestrator.suite import SuiteRunner

    cancel_event = asyncio.Event()
    _install_signal_handlers(cancel_event)
    table = SuiteTableExporter(console)
    runner = SuiteRunner(
        LoadTestOrchestrator(session_factory=load_session_factory(config)),
        on_case_complete=table,
    )

    table.print_header()
    try:
        results = await runner.run(config.to_run_parameters(), cancel_event)
    except SuiteCaseError as e:
        logger.error(str(e))
        return EXIT_CANCELLED if isinstance(e.__cause__, AdmissionCancelled) else EXIT_FAILURE

    logger.info(f"Suite complete: {len(results)}/{len(runner.cases)} cases")
    return EXIT_CANCELLED if cancel_event.is_set() else EXIT_OK
