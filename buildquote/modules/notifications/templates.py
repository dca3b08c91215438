"""Subjects and HTML bodies for every workflow email.

All interpolated values are user supplied (project names, notes, vendor
names) and are escaped here.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

from buildquote.modules.rfq.line_items import LineItem

_SIGNATURE = "<p>Thank you,<br>{sender}<br>{address}</p>"


@dataclass(frozen=True)
class ProjectSummary:
    """Project and requester fields shown in vendor-facing emails."""

    project_name: str = ""
    project_address: str = ""
    needed_by: str = ""
    notes: str = ""
    requester_name: str = ""
    requester_email: str = ""
    requester_phone: str = ""
    rfq_date: str = ""


def _e(value: object) -> str:
    return escape("" if value is None else str(value))


def _format_quantity(item: LineItem) -> str:
    return f"{item.quantity.normalize():f}" if item.quantity else ""


def _materials_list(items: list[LineItem]) -> str:
    lines = []
    for item in items:
        parts = [part for part in (item.size, item.unit) if part]
        detail = ", ".join(_e(part) for part in parts)
        line = f"- {_e(item.display_name)}: {detail + ', ' if detail else ''}Qty: {_format_quantity(item)}"
        if item.notes:
            line += f", Notes: {_e(item.notes)}"
        lines.append(line)
    return "<br>".join(lines)


def signature(sender: str, address: str) -> str:
    return _SIGNATURE.format(sender=_e(sender), address=_e(address))


def rfq_request(
    rfq_id: str,
    vendor_name: str,
    project: ProjectSummary,
    items: list[LineItem],
    file_links: list[str],
    reply_link: str,
    expiry_days: int,
) -> tuple[str, str]:
    subject = f"RFQ Request – {project.project_name}, RFQ ID #{rfq_id}"
    files_html = ", ".join(f'<a href="{_e(link)}">File</a>' for link in file_links) or "None"
    notes_html = (
        f"<p><strong>Project Notes:</strong> {_e(project.notes)}</p>" if project.notes else ""
    )
    html = f"""
        <p>Hello {_e(vendor_name)},</p>
        <p>We are requesting pricing and lead time for the following materials:</p>
        <p><strong>Project:</strong> {_e(project.project_name)}</p>
        <p><strong>Site Address:</strong> {_e(project.project_address)}</p>
        <p><strong>Needed By:</strong> {_e(project.needed_by)}</p>
        {notes_html}
        <p><strong>Requested Materials:</strong><br>{_materials_list(items)}</p>
        <p>Files: {files_html}</p>
        <p>Please submit your pricing and lead time using your secure vendor link below:<br>
        <a href="{_e(reply_link)}">Submit Your Reply</a></p>
        <p>This link is unique to you and will expire in {expiry_days} days.</p>
    """
    return subject, html


def award_access(rfq_id: str, award_link: str, expiry_days: int) -> tuple[str, str]:
    subject = f"RFQ Award Access - RFQ ID #{rfq_id}"
    html = f"""
        <p>Hello,</p>
        <p>You have been granted access to award RFQ #{_e(rfq_id)}.</p>
        <p>Please use the secure link below to access the award interface:</p>
        <p><a href="{_e(award_link)}">Access Award Interface</a></p>
        <p>Or copy and paste this link: {_e(award_link)}</p>
        <p>This link is secure and will expire in {expiry_days} days.</p>
    """
    return subject, html


def reply_confirmation(rfq_id: str, reply_id: str) -> tuple[str, str]:
    subject = f"Reply Confirmation - RFQ ID #{rfq_id}"
    html = f"""
        <p>Hello,</p>
        <p>Thank you for submitting your reply to RFQ #{_e(rfq_id)}.</p>
        <p><strong>Reply ID:</strong> {_e(reply_id)}</p>
        <p>The requester will review all vendor replies and you will be notified
        by email if any of your items are awarded.</p>
    """
    return subject, html


def requester_award_confirmation(rfq_id: str, item_name: str, vendor_name: str) -> tuple[str, str]:
    subject = f"You Have Awarded {vendor_name} for RFQ #{rfq_id}"
    html = f"""
        <p>Hello,</p>
        <p>This is to confirm that you have successfully awarded the item
        <strong>"{_e(item_name)}"</strong> to <strong>{_e(vendor_name)}</strong>
        for RFQ #{_e(rfq_id)}.</p>
        <p>The vendor has been notified and can now proceed with the next steps.</p>
    """
    return subject, html


def vendor_award_notification(
    rfq_id: str,
    item_name: str,
    vendor_name: str,
    project: ProjectSummary,
) -> tuple[str, str]:
    subject = f"You've Been Awarded an Item for RFQ #{rfq_id}!"
    html = f"""
        <h2>Congratulations, {_e(vendor_name)}!</h2>
        <p>We are pleased to inform you that you have been
        <strong>awarded the item "{_e(item_name)}"</strong> for <strong>RFQ #{_e(rfq_id)}</strong>.</p>
        <h3>Project Details</h3>
        <table>
          <tr><td><strong>Project Name:</strong></td><td>{_e(project.project_name)}</td></tr>
          <tr><td><strong>Address:</strong></td><td>{_e(project.project_address)}</td></tr>
          <tr><td><strong>Needed By:</strong></td><td>{_e(project.needed_by or "Not specified")}</td></tr>
          <tr><td><strong>RFQ Date:</strong></td><td>{_e(project.rfq_date)}</td></tr>
        </table>
        <h3>Buyer Information</h3>
        <table>
          <tr><td><strong>Buyer Name:</strong></td><td>{_e(project.requester_name)}</td></tr>
          <tr><td><strong>Email:</strong></td><td><a href="mailto:{_e(project.requester_email)}">{_e(project.requester_email)}</a></td></tr>
          <tr><td><strong>Phone:</strong></td><td><a href="tel:{_e(project.requester_phone)}">{_e(project.requester_phone)}</a></td></tr>
        </table>
        <p>Please reach out to the buyer directly using the contact information above
        to coordinate the next steps for delivery and payment.</p>
    """
    return subject, html
