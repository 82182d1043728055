"""Email rendering for post notifications."""

from __future__ import annotations

from html import escape

from church_site.components.notifications.models import (
    NotificationConfig,
    NotificationPayload,
)

DEFAULT_TYPE_LABEL = "News"


def render_subject(payload: NotificationPayload, config: NotificationConfig) -> str:
    prefix = config.subject_prefix.strip()
    return f"{prefix} {payload.title}" if prefix else payload.title


def _type_label(payload: NotificationPayload, config: NotificationConfig) -> str:
    return config.type_labels.get(payload.type, DEFAULT_TYPE_LABEL)


def _date_label(payload: NotificationPayload) -> str:
    d = payload.published_at
    return f"{d:%B} {d.day}, {d.year}"


def render_text(payload: NotificationPayload, config: NotificationConfig) -> str:
    site_url = config.site_url.rstrip("/")
    return "\n".join(
        [
            f"[{_type_label(payload, config)}] {payload.title}",
            _date_label(payload),
            "",
            payload.content,
            "",
            f"More news: {site_url}",
            "",
            f"You are receiving this because you subscribed to {config.site_name} news.",
            f"Unsubscribe: {site_url}/unsubscribe",
        ]
    )


def render_html(payload: NotificationPayload, config: NotificationConfig) -> str:
    site_url = escape(config.site_url.rstrip("/"))
    site_name = escape(config.site_name)
    title = escape(payload.title)

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.8; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: #000; color: #fff; padding: 32px 24px; text-align: center;">
    <span style="font-size: 12px;">{escape(_type_label(payload, config))}</span>
    <h1 style="margin: 0; font-size: 28px;">{title}</h1>
    <p style="margin-top: 8px; font-size: 14px;">{_date_label(payload)}</p>
  </div>
  <div style="padding: 32px 24px; font-size: 16px; white-space: pre-wrap;">{escape(payload.content)}</div>
  <div style="text-align: center; padding: 24px; background: #f8f9fa;">
    <a href="{site_url}" style="background: #000; color: #fff; padding: 14px 28px; text-decoration: none;">Visit the website</a>
  </div>
  <div style="padding: 24px; text-align: center; font-size: 12px; color: #666;">
    <p><strong>{site_name}</strong></p>
    <p>You are receiving this because you subscribed to {site_name} news.<br>
    <a href="{site_url}/unsubscribe">Unsubscribe</a></p>
  </div>
</body>
</html>"""
