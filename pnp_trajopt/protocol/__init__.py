"""Problem enums and solver handoff encoding."""
