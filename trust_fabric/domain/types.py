"""기본 타입 정의 — 모델 전체에서 공유하는 Annotated 타입."""

from typing import Annotated

from pydantic import Field

# 서비스 식별자: 소문자 + 숫자 + '_' (예: "org1", "acapy_issuer")
ServiceId = Annotated[str, Field(pattern=r"^[a-z][a-z0-9_]*$", examples=["org1", "reg", "dx"])]

# TCP 포트
Port = Annotated[int, Field(ge=1, le=65535)]

# 경로: '/'로 시작 (예: "/api/v1/status")
UrlPath = Annotated[str, Field(pattern=r"^/")]

# Semantic version (예: "1.0.0", "2.1.0-rc.1")
SemVer = Annotated[str, Field(pattern=r"^\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$")]

# HTTP 상태 코드
StatusCode = Annotated[int, Field(ge=100, le=599)]

# 경과 시간 (초)
Seconds = Annotated[float, Field(ge=0)]
