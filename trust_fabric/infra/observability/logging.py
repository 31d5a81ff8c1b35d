"""로그 설정 — structlog 렌더러를 stdlib logging 핸들러에 연결.

오케스트레이터 모듈은 logging.getLogger(__name__) + %-포맷 메시지만 사용.
CLI가 시작 시 한 번 setup_logging()을 호출하며 출력은 stderr 전용
(stdout은 status/doctor/env-dump 결과).

Usage:
    from trust_fabric.infra.observability.logging import setup_logging

    setup_logging("trust-fabric", command="wait", json_output=True)
    logging.getLogger(__name__).info("Waiting for %s", "org1")
"""

import logging
import sys

import structlog

_PACKAGE_PREFIX = "trust_fabric."


def _short_logger_name(_logger, _method: str, event_dict: dict) -> dict:
    """trust_fabric.orchestrator.poller → orchestrator.poller"""
    name = event_dict.get("logger")
    if isinstance(name, str) and name.startswith(_PACKAGE_PREFIX):
        event_dict["logger"] = name[len(_PACKAGE_PREFIX) :]
    return event_dict


def _build_renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def setup_logging(
    service_name: str = "trust-fabric",
    *,
    command: str | None = None,
    log_level: str = "INFO",
    json_output: bool = False,
) -> None:
    """stdlib 루트 로거 + structlog 설정.

    Args:
        service_name: 모든 이벤트에 붙는 app 이름
        command: 실행 중인 CLI 서브커맨드 (있으면 이벤트에 포함)
        log_level: DEBUG, INFO, WARNING, ERROR
        json_output: True면 한 줄 JSON (CI 로그 수집용), False면 콘솔 형식
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    # 반복 호출(테스트, 재설정) 시 이전 핸들러 교체
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _short_logger_name,
        # 콘솔은 시각만, JSON은 UTC ISO
        structlog.processors.TimeStamper(fmt="iso" if json_output else "%H:%M:%S", utc=json_output),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_build_renderer(json_output),
        foreign_pre_chain=pre_chain,
    )
    for handler in logging.getLogger().handlers:
        handler.setFormatter(formatter)

    # 폴링 요청마다 찍히는 httpx INFO 로그 제외
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(app=service_name)
    if command:
        structlog.contextvars.bind_contextvars(command=command)
