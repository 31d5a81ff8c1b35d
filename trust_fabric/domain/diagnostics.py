"""진단 리포트 모델 — 제어 흐름에 영향 없음."""

from pydantic import BaseModel

from .health import PollOutcome


class ServiceDiagnostic(BaseModel):
    service: str
    display_name: str
    required: bool
    base_url: str | None = None
    error: str | None = None  # 주소 해석 실패 사유
    outcome: PollOutcome | None = None


class FileCheck(BaseModel):
    path: str
    present: bool


class PortCheck(BaseModel):
    name: str
    host: str
    port: int | None = None
    open: bool = False
    error: str | None = None


class DiagnosticsSummary(BaseModel):
    """doctor 출력 단위."""

    services: list[ServiceDiagnostic] = []
    files: list[FileCheck] = []
    ports: list[PortCheck] = []
    environment: dict[str, str] = {}

    @property
    def missing_files(self) -> list[str]:
        return [f.path for f in self.files if not f.present]

    def render(self) -> str:
        lines = ["== Services =="]
        for s in self.services:
            kind = "required" if s.required else "optional"
            address = s.base_url or f"<unresolved: {s.error}>"
            state = s.outcome.describe() if s.outcome else "unknown"
            lines.append(f"{s.display_name:<18s} {address:<28s} [{kind}] {state}")

        lines += ["", "== File presence checks =="]
        for f in self.files:
            lines.append(f"[{'OK' if f.present else 'MISS'}] {f.path}")

        if self.ports:
            lines += ["", "== Ports =="]
            for p in self.ports:
                target = f"{p.host}:{p.port}" if p.port is not None else p.host
                state = "open" if p.open else f"closed{f' ({p.error})' if p.error else ''}"
                lines.append(f"{p.name:<18s} {target:<28s} {state}")

        if self.environment:
            lines += ["", "# Effective environment (sanitized)"]
            lines += [f"{k}={v}" for k, v in self.environment.items()]

        return "\n".join(lines)
