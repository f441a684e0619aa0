"""
HTML bodies for transactional emails.
"""

from html import escape

from scheduling.services.i18n import Translator


def _layout(title: str, body: str) -> str:
    return (
        "<!doctype html><html><body style=\"font-family:Arial,sans-serif;color:#111827\">"
        f"<h2>{escape(title)}</h2>{body}</body></html>"
    )


def _button(label: str, href: str) -> str:
    return (
        f"<p><a href=\"{escape(href, quote=True)}\" "
        "style=\"background:#111827;color:#fff;padding:10px 16px;border-radius:6px;"
        f"text-decoration:none\">{escape(label)}</a></p>"
    )


def organization_created_template(
    t: Translator,
    *,
    org_name: str,
    org_domain: str,
    prev_link: str,
    new_link: str,
    owner_old_username: str,
    owner_new_username: str | None,
) -> str:
    body = "<p>{}</p>".format(
        escape(
            t(
                "email_organization_created_body",
                org_name=org_name,
                org_domain=org_domain,
                prev_link=prev_link,
                new_link=new_link,
            )
        )
    )
    if owner_new_username and owner_old_username != owner_new_username:
        body += "<p>{}</p>".format(
            escape(
                t(
                    "email_organization_created_username_changed",
                    old_username=owner_old_username,
                    new_username=owner_new_username,
                )
            )
        )
    return _layout(t("email_organization_created_subject", org_name=org_name), body)


def admin_organization_notification_template(
    t: Translator, *, org_slug: str, owner_email: str, webapp_ip_address: str
) -> str:
    body = "<p>{}</p>".format(
        escape(
            t(
                "email_admin_org_body",
                org_slug=org_slug,
                owner_email=owner_email,
                webapp_ip_address=webapp_ip_address,
            )
        )
    )
    return _layout(t("email_admin_org_subject", org_slug=org_slug), body)


def team_invite_template(
    t: Translator, *, inviter_name: str, team_name: str, join_link: str
) -> str:
    body = "<p>{}</p>{}".format(
        escape(t("email_team_invite_body", team_name=team_name)),
        _button(t("email_team_invite_accept"), join_link),
    )
    return _layout(
        t("email_team_invite_subject", inviter_name=inviter_name, team_name=team_name), body
    )


def cancelled_seat_template(t: Translator, *, title: str, start_time: str) -> str:
    body = "<p>{}</p>".format(
        escape(t("email_cancelled_seat_body", title=title, start_time=start_time))
    )
    return _layout(t("email_cancelled_seat_subject", title=title), body)
