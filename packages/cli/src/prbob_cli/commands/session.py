"""Session commands: login, callback, logout, whoami."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console
from rich.markup import escape

from prbob_cli.render import describe_session
from prbob_cli.runtime import Runtime, check_session, open_runtime
from prbob_core.auth.session import SignedIn
from prbob_core.errors import ConfigurationError, PRBobError

console = Console()

GITHUB_PAT_URL = "https://github.com/settings/tokens/new?scopes=repo&description=prbob%20AI%20Code%20Reviewer"


def _report_sign_in(session) -> None:
    if isinstance(session, SignedIn):
        console.print("[bold green]Authentication Successful![/bold green]")
        console.print(describe_session(session))
        console.print("[dim]Other open prbob sessions on this profile pick up the sign-in automatically.[/dim]")
        return
    raise click.ClickException(getattr(session, "error", None) or "Sign-in did not complete.")


async def _ask(runtime: Runtime, text: str, hide_input: bool = False) -> str | None:
    """Prompt for sign-in input, unless another session signs in first.

    Changes from other sessions are applied before the prompt is shown and
    again once it is answered. Returns None when a sign-in elsewhere closed
    the prompt; an empty answer is then enough to pick it up.
    """
    controller = runtime.controller
    await controller.sync()
    if not controller.prompt_open:
        return None
    answer = click.prompt(text, default="", show_default=False, hide_input=hide_input)
    await controller.sync()
    if not controller.prompt_open:
        return None
    if not answer.strip():
        raise click.UsageError("Nothing was entered.")
    return answer.strip()


async def _oauth_sign_in(runtime: Runtime, open_browser: bool):
    url = runtime.oauth.build_authorization_url()
    console.print("Open this URL to sign in with GitHub:\n")
    console.print(url, soft_wrap=True)
    if open_browser:
        click.launch(url)
    location = await _ask(runtime, "\nPaste the URL GitHub redirected you to")
    if location is None:
        return runtime.controller.session
    return await check_session(runtime, console, location=location)


async def _token_sign_in(runtime: Runtime, token: str):
    with console.status("Verifying..."):
        try:
            return await runtime.controller.login_with_token(token)
        except PRBobError as e:
            raise click.ClickException(str(e))


async def _pat_sign_in(runtime: Runtime):
    console.print(
        "Use a Personal Access Token (PAT) with the [cyan]repo[/cyan] scope.\n"
        f"Create one here: {GITHUB_PAT_URL}"
    )
    token = await _ask(runtime, "Personal Access Token", hide_input=True)
    if token is None:
        return runtime.controller.session
    return await _token_sign_in(runtime, token)


@click.command("login")
@click.option("--token", "use_token", is_flag=True, help="Sign in with a personal access token.")
@click.option(
    "--from-env",
    is_flag=True,
    help="Sign in with GITHUB_TOKEN or the token of your gh CLI session.",
)
@click.option("--no-browser", is_flag=True, help="Print the sign-in URL without opening a browser.")
@click.pass_context
def login_cmd(ctx, use_token: bool, from_env: bool, no_browser: bool):
    """Connect GitHub so private repositories can be reviewed.

    Defaults to GitHub OAuth sign-in. When the OAuth app is not configured,
    falls back to a personal access token.
    """
    from prbob_cli.auth import discover_github_token

    config = ctx.obj["config"]
    store = ctx.obj["store"]

    env_token = None
    if from_env:
        env_token = discover_github_token()
        if not env_token:
            raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    async def _run():
        async with open_runtime(config, store) as runtime:
            session = await check_session(runtime, console)
            if isinstance(session, SignedIn):
                console.print(describe_session(session))
                return None

            runtime.controller.open_prompt()
            if env_token:
                return await _token_sign_in(runtime, env_token)
            if not use_token:
                try:
                    return await _oauth_sign_in(runtime, open_browser=not no_browser)
                except ConfigurationError as e:
                    console.print(f"[bold red]Configuration Required[/bold red]\n[red]{e}[/red]")
                    console.print(
                        "[dim]Set GITHUB_CLIENT_ID or github_client_id in .prbob.yml to enable "
                        "GitHub sign-in. Continuing with a personal access token.[/dim]\n"
                    )
            return await _pat_sign_in(runtime)

    session = asyncio.run(_run())
    if session is not None:
        _report_sign_in(session)


@click.command("callback")
@click.argument("location")
@click.pass_context
def callback_cmd(ctx, location: str):
    """Finish a GitHub sign-in from the URL GitHub redirected to."""

    async def _run():
        async with open_runtime(ctx.obj["config"], ctx.obj["store"]) as runtime:
            session = await check_session(runtime, console, location=location)
            return session, runtime.controller.location

    session, remaining = asyncio.run(_run())
    # The code is spent; only the code-free URL is safe to reuse.
    if remaining:
        console.print(f"[dim]Return to {escape(remaining)}[/dim]")
    _report_sign_in(session)


@click.command("logout")
@click.pass_context
def logout_cmd(ctx):
    """Forget the stored GitHub token in every prbob session on this profile."""

    async def _run():
        async with open_runtime(ctx.obj["config"], ctx.obj["store"]) as runtime:
            return runtime.controller.logout()

    asyncio.run(_run())
    console.print("Signed out.")


@click.command("whoami")
@click.pass_context
def whoami_cmd(ctx):
    """Show the GitHub account prbob is signed in with."""

    async def _run():
        async with open_runtime(ctx.obj["config"], ctx.obj["store"]) as runtime:
            return await check_session(runtime, console)

    console.print(describe_session(asyncio.run(_run())))
