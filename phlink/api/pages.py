"""HTML shown in the browser after the Product Hunt redirect completes."""

from __future__ import annotations

from html import escape

from phlink.schemas import ProviderProfile

_SUCCESS_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Authorization Successful</title>
    <style>
      body {{
        font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
        display: flex;
        align-items: center;
        justify-content: center;
        height: 100vh;
        margin: 0;
        background-color: #f9f9f9;
      }}
      .container {{
        text-align: center;
        padding: 2rem;
        background: white;
        border-radius: 8px;
        box-shadow: 0 2px 4px rgba(0,0,0,0.1);
      }}
      h1 {{ color: #4b587c; }}
      p {{ color: #666; }}
      .success-icon {{ font-size: 48px; margin-bottom: 1rem; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="success-icon">✅</div>
      <h1>Authorization Successful!</h1>
      <p>Your Product Hunt account <strong>@{username}</strong> ({name}) is now connected.</p>
      <p>You can close this window and return to Telegram.</p>
      <hr>
      <h1>Авторизация успешна!</h1>
      <p>Ваш аккаунт Product Hunt <strong>@{username}</strong> ({name}) успешно подключен.</p>
      <p>Можете закрыть это окно и вернуться в Telegram.</p>
    </div>
  </body>
</html>
"""


def render_success_page(profile: ProviderProfile) -> str:
    return _SUCCESS_TEMPLATE.format(
        username=escape(profile.username),
        name=escape(profile.display_name),
    )


__all__ = ["render_success_page"]
