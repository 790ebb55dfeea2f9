"""
scripts/health/services.py — Live HTTP probes against the running stack.

Every probe catches its own transport and parsing errors and turns them into
a failed CheckResult, so one service being down never stops the others from
being reported. Each probe prints its status line as soon as it resolves.
"""

from __future__ import annotations

from typing import Any

import httpx

from config.stack import ServiceDescriptor
from scripts.console import log_result
from scripts.health import CheckResult

STAGE_HEALTH = "1-service-health"
STAGE_FUNCTIONAL = "2-core-functionality"
DEFAULT_TIMEOUT_SECONDS = 5.0

CAPABILITIES_PATH = "/api/task/capabilities"
EXECUTE_PATH = "/api/task/execute"
CHAT_PATH = "/api/chat"

EXECUTE_PAYLOAD = {
    "capability": "calculate",
    "action": "compute",
    "params": {"expression": "2 + 2"},
    "respondTo": {
        "channel": "test",
        "details": {"type": "test", "channelId": "test-e2e"},
    },
}
CHAT_MESSAGE = "Hello from e2e test"
CHAT_PREVIEW_CHARS = 50


def _describe(exc: Exception) -> str:
    # httpx timeouts often carry an empty message
    return str(exc) or type(exc).__name__


def _report(result: CheckResult) -> CheckResult:
    log_result(result.passed, result.message)
    return result


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _failed(stage: str, name: str, label: str, reason: str) -> CheckResult:
    return _report(CheckResult(stage, name, False, f"{label} failed: {reason}", detail=reason))


async def check_health(
    client: httpx.AsyncClient,
    service: ServiceDescriptor,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> CheckResult:
    """GET {base_url}/health; passes only on a 2xx inside the timeout."""
    name = f"{service.name} health"
    label = f"{service.name} health check"
    try:
        response = await client.get(f"{service.base_url}/health", timeout=timeout)
    except httpx.TimeoutException:
        return _failed(STAGE_HEALTH, name, label, f"timed out ({timeout:g}s)")
    except httpx.HTTPError as e:
        return _failed(STAGE_HEALTH, name, label, _describe(e))
    except Exception as e:  # noqa: BLE001
        return _failed(STAGE_HEALTH, name, label, f"error: {_describe(e)}")

    if not response.is_success:
        return _failed(STAGE_HEALTH, name, label, str(response.status_code))
    return _report(CheckResult(STAGE_HEALTH, name, True, f"{label} passed"))


async def check_capability_listing(client: httpx.AsyncClient, base_url: str) -> CheckResult:
    name = "Capabilities list"
    try:
        response = await client.get(f"{base_url}{CAPABILITIES_PATH}")
    except Exception as e:  # noqa: BLE001
        return _failed(STAGE_FUNCTIONAL, name, name, _describe(e))

    if not response.is_success:
        return _failed(STAGE_FUNCTIONAL, name, name, str(response.status_code))

    data = _json_or_none(response)
    capabilities = data.get("capabilities") if isinstance(data, dict) else None
    count = len(capabilities) if isinstance(capabilities, list) else 0
    return _report(
        CheckResult(
            STAGE_FUNCTIONAL,
            name,
            True,
            f"Capabilities service lists {count} capabilities",
        )
    )


async def check_capability_execution(client: httpx.AsyncClient, base_url: str) -> CheckResult:
    """POST a calculate job. Jobs may be queued, so any 2xx counts as accepted."""
    name = "Calculate capability"
    try:
        response = await client.post(f"{base_url}{EXECUTE_PATH}", json=EXECUTE_PAYLOAD)
    except Exception as e:  # noqa: BLE001
        return _failed(STAGE_FUNCTIONAL, name, name, _describe(e))

    if not response.is_success:
        return _failed(STAGE_FUNCTIONAL, name, name, str(response.status_code))

    data = _json_or_none(response)
    message = data.get("message") if isinstance(data, dict) else None
    return _report(
        CheckResult(
            STAGE_FUNCTIONAL,
            name,
            True,
            f"Calculate capability executed: {message or 'queued'}",
        )
    )


async def check_chat_endpoint(
    client: httpx.AsyncClient,
    base_url: str,
    token: str = "test",
    user_id: str = "test-e2e-user",
) -> CheckResult:
    name = "Chat endpoint"
    try:
        response = await client.post(
            f"{base_url}{CHAT_PATH}",
            json={"message": CHAT_MESSAGE, "userId": user_id},
            headers={"Authorization": f"Bearer {token}"},
        )
    except Exception as e:  # noqa: BLE001
        return _failed(STAGE_FUNCTIONAL, name, name, _describe(e))

    if not response.is_success:
        return _failed(STAGE_FUNCTIONAL, name, name, str(response.status_code))

    data = _json_or_none(response)
    content = data.get("content") if isinstance(data, dict) else None
    preview = content[:CHAT_PREVIEW_CHARS] if isinstance(content, str) and content else "success"
    return _report(
        CheckResult(STAGE_FUNCTIONAL, name, True, f"Chat endpoint responded: {preview}...")
    )
