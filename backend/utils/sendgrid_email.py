"""SendGrid helpers shared across the backend."""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from python_http_client.exceptions import HTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, ReplyTo

logger = logging.getLogger(__name__)

FONT = "ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Arial"


def escape_html(text) -> str:
    if text is None:
        return ""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def _looks_like_full_html(html: str) -> bool:
    if not html:
        return False
    return bool(re.search(r"<html\b|<!doctype\b", html, flags=re.IGNORECASE))


def branded_html(
    *,
    title: str,
    intro: str = "",
    content_html: str = "",
    cta_label: str = "",
    cta_url: str = "",
) -> str:
    """
    Table-based layout (renders in most mail clients): warm header, white card.
    ``content_html`` is inserted as is.
    """
    brand = getattr(settings, "EMAIL_BRAND_NAME", "Food Savvy")
    support_email = getattr(settings, "SUPPORT_EMAIL", "")

    cta_block = ""
    if cta_label and cta_url:
        cta_block = f"""
          <tr>
            <td style="padding: 18px 0 6px 0;">
              <a href="{escape_html(cta_url)}"
                 style="display:inline-block;background:#ea580c;color:#ffffff;text-decoration:none;
                        padding:12px 18px;border-radius:12px;font-weight:700;font-size:14px;">
                {escape_html(cta_label)}
              </a>
            </td>
          </tr>
        """

    support_block = ""
    if support_email:
        support_block = f"""
                <div style="font-family:{FONT};color:#78716c;font-size:12px;line-height:1.6;margin-top:16px;">
                  Questions about your order? <a href="mailto:{escape_html(support_email)}"
                    style="color:#ea580c;text-decoration:none;">{escape_html(support_email)}</a>
                </div>"""

    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width" />
    <title>{escape_html(title or brand)}</title>
  </head>
  <body style="margin:0;padding:0;background:#fff7ed;">
    <table role="presentation" cellpadding="0" cellspacing="0" width="100%" style="background:#fff7ed;">
      <tr>
        <td align="center" style="padding: 28px 12px;">
          <table role="presentation" cellpadding="0" cellspacing="0" width="640" style="max-width:640px;width:100%;">
            <tr>
              <td style="padding: 0 0 14px 0;">
                <div style="font-family:{FONT};color:#9a3412;font-weight:900;font-size:20px;">
                  {escape_html(brand)}
                </div>
              </td>
            </tr>
            <tr>
              <td style="background:#ffffff;border:1px solid #fed7aa;border-radius:18px;padding:22px;">
                <div style="font-family:{FONT};color:#1c1917;font-size:18px;font-weight:800;line-height:1.3;">
                  {escape_html(title or brand)}
                </div>
                <div style="font-family:{FONT};color:#57534e;font-size:14px;line-height:1.6;margin-top:10px;">
                  {escape_html(intro)}
                </div>
                <div style="height: 12px;"></div>
                <div style="font-family:{FONT};color:#292524;font-size:14px;line-height:1.7;">
                  {content_html}
                </div>
                <table role="presentation" cellpadding="0" cellspacing="0" width="100%">
                  {cta_block}
                </table>
                {support_block}
              </td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>
"""


def _summarize_sendgrid_exception(exc: Exception) -> Tuple[Optional[int], str]:
    status_code = getattr(exc, "status_code", None)
    body = getattr(exc, "body", None)
    if isinstance(body, (bytes, bytearray)):
        body = body.decode(errors="ignore")
    return status_code, str(body or "")[:800]


def send_email_with_sendgrid(
    *,
    to_email: str,
    subject: str,
    text_body: str,
    html_body: Optional[str] = None,
    fallback_to_django: bool = True,
) -> bool:
    """
    Send through SendGrid when SENDGRID_API_KEY is set, else (or on failure)
    through Django's EmailMultiAlternatives. Returns True if either path sent.
    """
    if not to_email:
        logger.debug("Email skipped: no recipient.")
        return False

    from_email = getattr(settings, "SENDGRID_FROM_EMAIL", "")
    reply_to = getattr(settings, "REPLY_TO_EMAIL", "") or getattr(settings, "SUPPORT_EMAIL", "")
    if "," in from_email:
        from_email = from_email.split(",")[0].strip()

    if html_body and _looks_like_full_html(html_body):
        final_html = html_body
    elif html_body:
        final_html = branded_html(title=subject, content_html=html_body.strip())
    else:
        safe = escape_html(text_body or "").replace("\n\n", "</p><p style='margin:0 0 10px 0;'>").replace("\n", "<br/>")
        final_html = branded_html(title=subject, content_html=f"<p style='margin:0 0 10px 0;'>{safe}</p>")

    sent_via_sendgrid = False
    sent_via_django = False

    api_key = getattr(settings, "SENDGRID_API_KEY", None)
    if api_key:
        sg_mail = Mail(
            from_email=from_email,
            to_emails=[to_email],
            subject=subject,
            plain_text_content=text_body or "",
            html_content=final_html,
        )
        if reply_to:
            sg_mail.reply_to = ReplyTo(reply_to)
        try:
            resp = SendGridAPIClient(api_key).send(sg_mail)
        except (HTTPError, OSError) as exc:
            status_code, body_snippet = _summarize_sendgrid_exception(exc)
            if status_code in (401, 403):
                logger.error(
                    "SendGrid auth error (%s) for %s. Check SENDGRID_API_KEY and its Mail Send permission. Body=%s",
                    status_code,
                    to_email,
                    body_snippet or str(exc),
                )
            else:
                logger.warning("SendGrid send failed (%s) status=%s body=%s", to_email, status_code, body_snippet)
        else:
            status_code = getattr(resp, "status_code", None)
            if status_code and int(status_code) >= 400:
                logger.warning("SendGrid responded error: to=%s status=%s", to_email, status_code)
            else:
                sent_via_sendgrid = True
    else:
        logger.warning("SendGrid not configured: SENDGRID_API_KEY missing.")

    if not sent_via_sendgrid and fallback_to_django:
        msg = EmailMultiAlternatives(
            subject=subject,
            body=text_body or "",
            from_email=from_email or None,
            to=[to_email],
            reply_to=[reply_to] if reply_to else None,
        )
        msg.attach_alternative(final_html, "text/html")
        # send() returns the number of messages delivered
        sent_via_django = (msg.send(fail_silently=True) or 0) > 0
        if not sent_via_django:
            logger.warning("Django email fallback sent nothing for %s.", to_email)

    sent = bool(sent_via_sendgrid or sent_via_django)
    logger.info(
        "Email send result: to=%s sendgrid=%s django_fallback=%s final=%s subject=%s",
        to_email,
        sent_via_sendgrid,
        sent_via_django,
        sent,
        subject,
    )
    return sent
