#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import signal
import click
from typing import Optional

from prompt_toolkit.application.current import get_app

from rich.panel import Panel
from rich.markup import escape
from rich.text import Text

from contact_cli.client import HttpClient
from contact_cli.controller import SubmissionController, SubmissionState
from contact_cli.key_manager import KeyBindingManager, SessionFactory
from contact_cli.key_store import KeyStore
from contact_cli.utils import Config, FormFields, mask_secret
from contact_cli.display import (
    console, error_panel, success_panel, info_panel, print_rule, setup_logging, use_theme,
)


# ========== Application Orchestrator ==========
class App:
    def __init__(self, cfg: Config, http: Optional[HttpClient] = None):
        self.cfg = cfg
        self.http = http or HttpClient(cfg)
        self.controller = SubmissionController(cfg, self.http, on_change=self._render_state)
        self.counter = 1

    def _build_sessions(self):
        def accept():
            app = get_app()
            buf = app.current_buffer
            app.exit(result=buf.text)

        def clear():
            raise KeyboardInterrupt()

        self.kbm = KeyBindingManager(accept_callback=accept, clear_callback=clear)
        self.session = SessionFactory.build_session(self.kbm.bindings)
        self.line_session = SessionFactory.build_line_session()

    def run(self):
        self._build_sessions()
        self._print_banner()

        while True:
            try:
                fields = self._read_form()
                self.controller.submit(fields)
                self.counter += 1
            except KeyboardInterrupt:
                console.print("[warn] Form cleared.（Ctrl+C）[/warn]")
                self.controller.reset()
                continue
            except EOFError:
                console.print("\n[info]Exited.（Ctrl+D）[/info]")
                break
            except Exception as e:
                console.print(Panel.fit(Text(repr(e), no_wrap=False), title="Unexpected error !", border_style="red"))
                self.counter += 1
                continue

    def send(self, fields: FormFields) -> SubmissionState:
        return self.controller.submit(fields)

    def _render_state(self, state: SubmissionState, message: Optional[str]):
        if state is SubmissionState.SUBMITTING:
            console.print(f"[info]Sending... ->[/info] {escape(self.cfg.endpoint)}")
        elif state is SubmissionState.SUCCESS:
            result = self.controller.last_result
            if self.cfg.debug and result is not None:
                success_panel("Success", f"Status: {result.status_code}\nResponse: {result.text}")
            else:
                success_panel("Success", "Message sent successfully!")
        elif state is SubmissionState.ERROR:
            result = self.controller.last_result
            if self.cfg.debug and result is not None:
                detail = result.error or result.text
                error_panel("Send error.", f"{message}\nStatus: {result.status_code}\nResponse: {detail}")
            else:
                error_panel("Send error.", message or "")

    # ========== Internal helpers ==========
    def _read_form(self) -> FormFields:
        # after an error the previous input is offered again, after success it is empty
        prev = self.controller.fields
        name = self.line_session.prompt(
            SessionFactory.make_prompt_fragments(self.counter, "name"), default=prev.name)
        email = self.line_session.prompt(
            SessionFactory.make_prompt_fragments(self.counter, "email"), default=prev.email)
        message = self.session.prompt(
            SessionFactory.make_prompt_fragments(self.counter, "message"), default=prev.message)
        return FormFields(name=name, email=email, message=message)

    def _print_banner(self):
        submit_hint = "、".join(self.kbm.submit_labels) or "Ctrl+J"
        print_rule("Contact")
        info_panel("Help", (
            "Descriptions：\n"
            " - Fill in name and email, then write your message\n"
            f" - Send message：{submit_hint}\n"
            " - Clear form：Ctrl+C\n"
            " - Exit：Ctrl+D\n\n"
            "The message box is multi-line, Enter starts a new line."
        ))
        console.print(f"[info]Relay endpoint：[/info]{escape(self.cfg.endpoint)}")
        if not self.cfg.has_access_key:
            console.print("[warn] No access key configured, sending will fail. See `contact-cli config`.[/warn]")
        if not self.cfg.verify_tls:
            console.print("[warn] Disable tls verification !（--insecure）[/warn]")


# ========== CLI with Click ==========

@click.group()
@click.option("--access-key", help="Relay access key, overrides WEB3FORMS_ACCESS_KEY and the stored key.")
@click.option("--endpoint", help="Relay submission url.")
@click.option("--timeout", type=int, default=None, help="Max timeout in seconds, no limit by default.")
@click.option("--insecure", is_flag=True, help="Whether disable tls.")
@click.option("--debug", "-d", is_flag=True, help="Start with debug mode.")
@click.option("--theme", type=click.Choice(["light", "dark"]), default="light", show_default=True,
              help="Terminal color palette.")
@click.option("--key-file", type=click.Path(dir_okay=False), default=None,
              help="Where the access key is stored, ~/.contact.cli.toml by default.")
@click.pass_context
def cli(ctx, access_key, endpoint, timeout, insecure, debug, theme, key_file):
    """
    contact-cli: send a message through the contact form relay.
    """
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    setup_logging(debug)
    # Simulate argparse.Namespace for Config.init_from_args
    class Args:
        pass
    args = Args()
    args.access_key = access_key
    args.endpoint = endpoint
    args.timeout = timeout
    args.insecure = insecure
    args.debug = debug
    args.theme = theme
    store = KeyStore(key_file)
    cfg = Config.init_from_args(args, store=store)
    use_theme(cfg.theme)
    ctx.obj = {"cfg": cfg, "store": store}


@cli.command("run")
@click.pass_context
def run_cmd(ctx):
    """Open the interactive contact form."""
    cfg = ctx.obj["cfg"]
    app = App(cfg)
    try:
        app.run()
    finally:
        app.http.close()


@cli.command("send")
@click.option("--name", default="", help="Your name.")
@click.option("--email", default="", help="Your email address.")
@click.option("--message", "-m", default="", help="Message text.")
@click.pass_context
def send_cmd(ctx, name, email, message):
    """Send one message without the interactive form."""
    cfg = ctx.obj["cfg"]
    app = App(cfg)
    try:
        state = app.send(FormFields(name=name, email=email, message=message))
    finally:
        app.http.close()
    ctx.exit(0 if state is SubmissionState.SUCCESS else 1)


@cli.command("config")
@click.option("--access-key", "new_key", help="Store this access key.")
@click.option("--clear", is_flag=True, help="Forget the stored access key.")
@click.option("--show", is_flag=True, help="Show the stored access key (masked).")
@click.pass_context
def config_cmd(ctx, new_key, clear, show):
    """Manage the stored relay access key."""
    store: KeyStore = ctx.obj["store"]
    if clear:
        if store.clear():
            console.print(f"[ok]Removed[/ok] {escape(str(store.path))}")
        else:
            console.print(f"[warn]Nothing stored at[/warn] {escape(str(store.path))}")
    elif new_key:
        if not new_key.strip():
            raise click.BadParameter("access key must not be blank", param_hint="--access-key")
        try:
            store.save(new_key)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--access-key")
        console.print(f"[ok]Saved access key to[/ok] {escape(str(store.path))}")
    else:
        console.print(f"[info]Stored access key：[/info]{escape(mask_secret(store.load()))}")
        if not show:
            console.print("Use --access-key KEY to store one, --clear to forget it.")


def main():
    cli(prog_name="contact-cli")

if __name__ == "__main__":
    main()
