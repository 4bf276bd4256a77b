"""review command: run an AI review on a pull request URL."""

from __future__ import annotations

import asyncio
import json

import click
from rich.console import Console

from prbob_cli.render import print_review
from prbob_cli.runtime import check_session, open_runtime
from prbob_core.errors import PRBobError
from prbob_core.models import PRReference
from prbob_core.reviewer import get_reviewer, review_pull_request

console = Console()


@click.command("review")
@click.argument("url")
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw review result as JSON.")
@click.pass_context
def review_cmd(ctx, url: str, model: str | None, as_json: bool):
    """Review a GitHub pull request.

    Fetches the PR diff (using your GitHub session if you are signed in, so
    private repositories work), sends it to the AI reviewer and prints a
    quality report: overall score, breakage risk and itemized issues.

    \b
    Required environment variables:
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
    """
    config = dict(ctx.obj["config"])
    if model:
        config["model"] = model

    # Reject a bad URL before touching the network.
    try:
        ref = PRReference.parse(url)
    except PRBobError as e:
        raise click.UsageError(str(e))

    if config["model"] == "anthropic" and not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config["model"] == "openai" and not config.get("openai_api_key"):
        raise click.UsageError("OPENAI_API_KEY environment variable is not set.")

    engine = get_reviewer(config)
    store = ctx.obj["store"]

    async def _run():
        async with open_runtime(config, store) as runtime:
            await check_session(runtime, console)
            with console.status("Fetching PR data from GitHub and analyzing the changes..."):
                return await review_pull_request(
                    url,
                    engine=engine,
                    http=runtime.http,
                    token=runtime.controller.token,
                    api_url=config["github_api_url"],
                )

    try:
        result = asyncio.run(_run())
    except PRBobError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    console.print(f"\n[bold]{ref.slug}[/bold]")
    print_review(console, result)
