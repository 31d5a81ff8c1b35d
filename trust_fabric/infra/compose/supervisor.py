"""프로세스 그룹 제어 — docker compose CLI 래퍼.

오케스트레이터 코어는 ProcessSupervisor 프로토콜만 사용하고
docker를 직접 호출하지 않음. 테스트에서는 MagicMock(spec=ProcessSupervisor)로 대체.
"""

import logging
import subprocess
from typing import Protocol

from trust_fabric.domain.config import ComposeConfig
from trust_fabric.domain.errors import DestructiveActionRefused, SupervisorError

logger = logging.getLogger(__name__)


class ProcessSupervisor(Protocol):
    """관리 대상 프로세스 그룹 제어 인터페이스."""

    def start_all(self) -> None:
        """전체 기동 (이미 실행 중이어도 실패하지 않음)."""
        ...

    def stop_all(self, *, preserve_state: bool = True, confirm: bool = False) -> None:
        """전체 중지. preserve_state=False는 볼륨 삭제 — confirm=True 필수."""
        ...

    def restart(self, name: str) -> None: ...

    def render_config(self) -> str:
        """유효 설정 렌더링 (preflight 검증)."""
        ...

    def status(self) -> str: ...

    def container_health(self, container: str) -> str: ...


class ComposeSupervisor:
    """docker compose 기반 ProcessSupervisor 구현.

    Usage:
        supervisor = ComposeSupervisor(get_config().compose)
        supervisor.start_all()
    """

    def __init__(self, config: ComposeConfig | None = None, *, runner=subprocess.run):
        self._config = config or ComposeConfig()
        self._run = runner

    @property
    def base_command(self) -> list[str]:
        c = self._config
        return [c.docker_bin, "compose", "--project-name", c.project, "-f", c.file, "--env-file", c.env_file]

    def _compose(self, *args: str, capture: bool = False) -> str:
        cmd = [*self.base_command, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = self._run(cmd, check=False, capture_output=capture, text=True)
        except FileNotFoundError as e:
            raise SupervisorError(cmd, 127, str(e)) from e
        if result.returncode != 0:
            raise SupervisorError(cmd, result.returncode, result.stderr or "")
        return result.stdout or ""

    def start_all(self) -> None:
        logger.info("Starting stack %s", self._config.project)
        self._compose("up", "-d", "--remove-orphans")

    def stop_all(self, *, preserve_state: bool = True, confirm: bool = False) -> None:
        if preserve_state:
            logger.info("Stopping stack %s (volumes preserved)", self._config.project)
            self._compose("down")
            return
        if not confirm:
            raise DestructiveActionRefused("destroy volumes")
        logger.warning("Destroying stack %s including volumes", self._config.project)
        self._compose("down", "-v", "--remove-orphans")

    def restart(self, name: str) -> None:
        logger.info("Restarting %s", name)
        self._compose("restart", name)

    def render_config(self) -> str:
        return self._compose("config", capture=True)

    def status(self) -> str:
        return self._compose("ps", capture=True)

    def container_health(self, container: str) -> str:
        """컨테이너 헬스 상태 (healthy/unhealthy/starting). 조회 실패 시 "unknown"."""
        cmd = [self._config.docker_bin, "inspect", "-f", "{{json .State.Health.Status}}", container]
        try:
            result = self._run(cmd, check=False, capture_output=True, text=True)
        except FileNotFoundError:
            return "unknown"
        if result.returncode != 0:
            return "unknown"
        return (result.stdout or "").strip().strip('"') or "unknown"
