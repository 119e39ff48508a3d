"""
TaskFlow -- MCP server exposing the memory bank and task workflow as tools.

Run with:
    taskflow serve --memory-path ./memory-bank

Or configure in your MCP client as:
    {
        "mcpServers": {
            "taskflow": {
                "command": "taskflow",
                "args": ["serve", "--memory-path", "/path/to/memory-bank"]
            }
        }
    }

Tools exposed (13 total):
    Memory Bank:
        read_memory_file        -- Read a document (through the context cache)
        write_memory_file       -- Create or replace a document
        update_memory_file      -- Replace an existing document
        list_memory_files       -- List documents
        get_memory_bank_context -- Gather every document (async operation)
    Plan / Act:
        set_mode                -- Switch between plan and act mode
        get_current_mode        -- Current mode
        generate_plan           -- Plan a task (async operation)
        execute_task            -- Execute a task (async operation)
        document_insights       -- Append task insights to activeContext.md
    Operations:
        get_operation_status    -- Status of an async operation
        get_operation_result    -- Result of an async operation
    System:
        get_system_status       -- Health of every component

Every tool returns a JSON object with a ``success`` flag and never
raises to the transport.
"""

import asyncio
import json
import logging
import traceback
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from taskflow.core.config import Config
from taskflow.core.errors import StoreIOError
from taskflow.core.logging import configure_logging
from taskflow.core.types import now_iso
from taskflow.system import TaskflowSystem

log = logging.getLogger("taskflow.server")

#: Document that ``document_insights`` appends to.
ACTIVE_CONTEXT_DOC = "activeContext.md"

#: Maximum byte length for document content passed to a tool (1 MB).
MAX_CONTENT_BYTES = 1_000_000


def _validate_length(text: str, name: str) -> str:
    """Raise ValueError if *text* exceeds MAX_CONTENT_BYTES."""
    if len(text.encode("utf-8", errors="replace")) > MAX_CONTENT_BYTES:
        raise ValueError(
            f"'{name}' exceeds maximum length ({MAX_CONTENT_BYTES} bytes)."
        )
    return text


def _dump(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, default=str)


# ---------------------------------------------------------------------------
# Error-safe tool decorator
# ---------------------------------------------------------------------------


def _safe_json(fn):
    """Wrap an async MCP tool so exceptions return ``success: false`` JSON."""

    async def wrapper(*args: Any, **kwargs: Any) -> str:
        try:
            return await fn(*args, **kwargs)
        except Exception as exc:
            tool_name = getattr(fn, "__name__", "unknown")
            log.error("Tool %s failed: %s\n%s", tool_name, exc, traceback.format_exc())
            payload: Dict[str, Any] = {
                "success": False,
                "tool": tool_name,
                "error": str(exc),
            }
            if isinstance(exc, StoreIOError) and exc.name:
                payload["file_name"] = exc.name
            return _dump(payload)

    # Copy the function metadata so FastMCP sees the right
    # name, docstring, and parameter annotations.
    wrapper.__name__ = fn.__name__
    wrapper.__qualname__ = fn.__qualname__
    wrapper.__doc__ = fn.__doc__
    wrapper.__annotations__ = fn.__annotations__
    wrapper.__module__ = fn.__module__
    wrapper.__wrapped__ = fn  # type: ignore[attr-defined]
    return wrapper


# ---------------------------------------------------------------------------
# Server singleton
# ---------------------------------------------------------------------------

mcp = FastMCP(
    "TaskFlow Memory Server",
    instructions=(
        "Persistent memory bank of Markdown documents with plan/act "
        "task workflow. Long-running tools return an operation_id; "
        "poll get_operation_status / get_operation_result for results."
    ),
)

# Built once when the server starts.  Tools reference it via _get_system().
_system: Optional[TaskflowSystem] = None


def init_system(
    memory_dir: Optional[str] = None,
    config_path: Optional[str] = None,
    config: Optional[Config] = None,
    **kwargs: Any,
) -> TaskflowSystem:
    """Initialize the global TaskflowSystem instance."""
    global _system

    if config is None:
        if config_path:
            config = Config.from_yaml(config_path)
        elif memory_dir:
            config = Config.from_memory_dir(memory_dir, **kwargs)
        else:
            config = Config.from_env(**kwargs)

    _system = TaskflowSystem(config=config)
    return _system


def _current_system() -> TaskflowSystem:
    """Get the global TaskflowSystem, creating it if needed.  Does not init."""
    global _system
    if _system is None:
        _system = init_system()
    return _system


async def _get_system() -> TaskflowSystem:
    """Get the global TaskflowSystem, creating and initialising it if needed."""
    system = _current_system()
    # Retries a previously failed memory bank init; no-op once it succeeded.
    await system.init()
    return system


# ===========================================================================
# Memory Bank Tools
# ===========================================================================


@mcp.tool()
@_safe_json
async def read_memory_file(file_name: str) -> str:
    """Read a file from the Memory Bank.

    Args:
        file_name: Name of the file to read (e.g. "activeContext.md").
    """
    system = await _get_system()
    content = await system.cache.get(file_name)
    return _dump({"success": True, "file_name": file_name, "content": content})


@mcp.tool()
@_safe_json
async def write_memory_file(file_name: str, content: str) -> str:
    """Write content to a file in the Memory Bank, creating it if needed.

    Args:
        file_name: Name of the file to write.
        content: Full new content of the file.
    """
    _validate_length(content, "content")
    system = await _get_system()
    await system.store.write(file_name, content)
    system.cache.invalidate(file_name)
    return _dump({"success": True, "file_name": file_name})


@mcp.tool()
@_safe_json
async def update_memory_file(file_name: str, content: str) -> str:
    """Update an existing file in the Memory Bank.

    Fails if the file does not exist yet; use write_memory_file to
    create new files.

    Args:
        file_name: Name of the existing file.
        content: Full new content of the file.
    """
    _validate_length(content, "content")
    system = await _get_system()
    await system.store.read(file_name)
    await system.store.write(file_name, content)
    system.cache.invalidate(file_name)
    return _dump({"success": True, "file_name": file_name})


@mcp.tool()
@_safe_json
async def list_memory_files() -> str:
    """List all files in the Memory Bank."""
    system = await _get_system()
    files = sorted(await system.cache.list_keys())
    return _dump({"success": True, "files": files})


@mcp.tool()
@_safe_json
async def get_memory_bank_context() -> str:
    """Get the complete context from all Memory Bank files.

    Runs in the background. Returns an operation_id; fetch the
    name -> content mapping with get_operation_result.
    """
    system = await _get_system()
    op_id = system.operations.submit(system.cache.get_all)
    return _dump(
        {
            "success": True,
            "operation_id": op_id,
            "message": (
                "Started retrieving Memory Bank context. Use "
                "get_operation_result with operation_id to get results."
            ),
        }
    )


# ===========================================================================
# Plan / Act Tools
# ===========================================================================


@mcp.tool()
@_safe_json
async def set_mode(mode: str) -> str:
    """Set the current operating mode.

    Args:
        mode: "plan" or "act".
    """
    system = await _get_system()
    previous = system.modes.current.value
    system.modes.set_mode(mode, reason="set_mode tool")
    return _dump(
        {
            "success": True,
            "previous_mode": previous,
            "current_mode": system.modes.current.value,
        }
    )


@mcp.tool()
@_safe_json
async def get_current_mode() -> str:
    """Get the current operating mode (plan or act)."""
    system = await _get_system()
    return _dump({"success": True, "mode": system.modes.current.value})


@mcp.tool()
@_safe_json
async def generate_plan(task_description: str, include_memory_context: bool = True) -> str:
    """Generate a task plan based on project context.

    Switches to plan mode if needed. Runs in the background and
    returns an operation_id.

    Args:
        task_description: Description of the task to plan.
        include_memory_context: Use Memory Bank documents as planning context.
    """
    system = await _get_system()
    if not system.modes.is_plan_mode():
        previous = system.modes.current.value
        system.modes.set_mode("plan", reason="generate_plan")
        log.info("Switched from %s to plan mode for planning", previous)

    async def work() -> Dict[str, Any]:
        context = await system.cache.get_all() if include_memory_context else None
        return await system.planner.generate_plan(task_description, context)

    op_id = system.operations.submit(work)
    return _dump(
        {
            "success": True,
            "operation_id": op_id,
            "message": (
                f'Started generating plan for "{task_description}". Use '
                "get_operation_result with operation_id to get results."
            ),
        }
    )


@mcp.tool()
@_safe_json
async def execute_task(
    task_id: str,
    task_description: str,
    use_memory_context: bool = True,
) -> str:
    """Execute a specific task with proper context.

    Switches to act mode if needed. Runs in the background and
    returns an operation_id.

    Args:
        task_id: ID of the task to execute.
        task_description: Description of the task.
        use_memory_context: Use Memory Bank documents during execution.
    """
    system = await _get_system()
    if not system.modes.is_act_mode():
        previous = system.modes.current.value
        system.modes.set_mode("act", reason="execute_task")
        log.info("Switched from %s to act mode for execution", previous)

    async def work() -> Dict[str, Any]:
        context = await system.cache.get_all() if use_memory_context else None
        return await system.planner.execute_task(task_id, task_description, context)

    op_id = system.operations.submit(work)
    return _dump(
        {
            "success": True,
            "operation_id": op_id,
            "message": (
                f'Started executing task "{task_description}". Use '
                "get_operation_result with operation_id to get results."
            ),
        }
    )


@mcp.tool()
@_safe_json
async def document_insights(
    task_id: str,
    task_description: str,
    insights: str,
    update_memory_bank: bool = True,
) -> str:
    """Document insights from task execution.

    Args:
        task_id: ID of the task that produced the insights.
        task_description: Description of the task.
        insights: Insights to record.
        update_memory_bank: Append the insights to activeContext.md.
    """
    _validate_length(insights, "insights")
    system = await _get_system()
    timestamp = now_iso()
    record = {
        "task_id": task_id,
        "description": task_description,
        "insights": insights,
        "timestamp": timestamp,
    }

    if update_memory_bank:
        current = await system.cache.get(ACTIVE_CONTEXT_DOC)
        updated = (
            f"{current}\n\n## Insights from Task {task_id}\n\n{insights}\n\n"
            f"_Documented at {timestamp}_\n"
        )
        await system.cache.update(ACTIVE_CONTEXT_DOC, updated)
        log.info("Updated %s with insights from task %s", ACTIVE_CONTEXT_DOC, task_id)

    return _dump({"success": True, "insight_record": record})


# ===========================================================================
# Operation Tools
# ===========================================================================


@mcp.tool()
@_safe_json
async def get_operation_status(operation_id: str) -> str:
    """Get the status of an asynchronous operation.

    Args:
        operation_id: ID returned by a long-running tool.
    """
    system = await _get_system()
    status = system.operations.status(operation_id)
    if status is None:
        return _dump(
            {"success": False, "error": f"Operation not found: {operation_id}"}
        )
    return _dump({"success": True, "operation_id": operation_id, **status})


@mcp.tool()
@_safe_json
async def get_operation_result(operation_id: str) -> str:
    """Get the result of an asynchronous operation.

    Args:
        operation_id: ID returned by a long-running tool.
    """
    system = await _get_system()
    result = system.operations.result(operation_id)
    if result is None:
        return _dump(
            {"success": False, "error": f"Operation not found: {operation_id}"}
        )
    return _dump({"success": True, "operation_id": operation_id, **result})


# ===========================================================================
# System Tools
# ===========================================================================


@mcp.tool()
@_safe_json
async def get_system_status() -> str:
    """Get the current status of the TaskFlow system.

    Responds even when the memory bank cannot be initialised; the
    ``memory`` section then carries the error.
    """
    system = _current_system()
    try:
        await system.init()
    except StoreIOError as exc:
        log.warning("Reporting status for uninitialised Memory Bank: %s", exc)
    return _dump({"success": True, "status": await system.status()})


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def run_server(
    memory_dir: Optional[str] = None,
    config_path: Optional[str] = None,
    transport: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    log_level: Optional[str] = None,
) -> None:
    """Initialize the memory bank and run the MCP server.

    Transports:
        stdio (default):
            Single-client mode, spawned by the MCP client.
        streamable-http / sse:
            HTTP modes bound to ``host``:``port``.
    """
    if config_path:
        config = Config.from_yaml(config_path)
        if memory_dir:
            config.memory_bank_dir = Config.from_memory_dir(memory_dir).memory_bank_dir
    elif memory_dir:
        config = Config.from_memory_dir(memory_dir)
    else:
        config = Config.from_env()

    if transport:
        config.transport = transport
    if host:
        config.host = host
    if port:
        config.port = port
    if log_level:
        config.log_level = log_level.upper()
    config.validate()

    configure_logging(level=config.log_level, structured=config.structured_logging)

    system = init_system(config=config)
    asyncio.run(system.init())
    log.info(
        "Starting TaskFlow Memory Server (transport=%s, memory bank=%s)",
        config.transport,
        config.memory_bank_dir,
    )
    if config.transport in ("streamable-http", "sse"):
        mcp.settings.host = config.host
        mcp.settings.port = config.port
        log.info("HTTP endpoint: http://%s:%d", config.host, config.port)
    mcp.run(transport=config.transport)  # type: ignore[arg-type]
