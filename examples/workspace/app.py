"""Workspace — eager shell, preloaded dashboard, gated profile and admin.

Demonstrates the three ways a unit gets materialized:
1. Eager: the shell loads during ``start()``
2. Preload: the dashboard is fetched in the background right after startup
3. On demand: profile/admin/analytics load on first navigation, after their gates

Run:
    python app.py
    roost units examples.workspace.app
"""

import anyio

from roost import LoadMode, Orchestrator, RoostConfig, authenticated, import_unit, requires

# ---------------------------------------------------------------------------
# Session — the external context provider (a real app would read a cookie)
# ---------------------------------------------------------------------------

session: dict[str, object] = {"authenticated": False, "permissions": frozenset()}

# Redirects the orchestrator asked for, in order (a real app would hand
# these to its router)
redirects: list[str] = []

orchestrator = Orchestrator(
    RoostConfig(preload_strategy="flagged"),
    context_provider=lambda: session,
    on_redirect=redirects.append,
)


async def _fetch_bundle(name: str) -> dict[str, str]:
    """Stand-in for a network fetch of the unit's code bundle."""
    await anyio.sleep(0.01)
    return {"name": name, "component": f"<{name}-view>"}


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------


@orchestrator.unit("/", mode=LoadMode.EAGER)
async def shell():
    return await _fetch_bundle("shell")


@orchestrator.unit("/login")
async def login():
    return await _fetch_bundle("login")


@orchestrator.unit("/dashboard", preload=True)
async def dashboard():
    return await _fetch_bundle("dashboard")


@orchestrator.unit("/profile", gates=[authenticated(redirect_to="/login")])
async def profile():
    return await _fetch_bundle("profile")


@orchestrator.unit("/admin", gates=[requires("admin", redirect_to="/")], preload=True)
async def admin():
    return await _fetch_bundle("admin")


# Heavy dependency imported only when the unit is first needed
orchestrator.unit("/analytics", id="analytics")(import_unit("statistics"))


async def main() -> None:
    async with orchestrator:
        for path in ("/profile", "/dashboard"):
            result = await orchestrator.navigate(path)
            print(f"{path}: {result.status.value}")
        session["authenticated"] = True
        result = await orchestrator.navigate("/profile")
        print(f"/profile: {result.status.value} -> {result.handle.exports['component']}")


if __name__ == "__main__":
    anyio.run(main)
