from io import BytesIO

from xhtml2pdf import pisa

from mizan.templating import templates


class PdfGenerationError(RuntimeError):
    pass


def render_pdf(template_name: str, context: dict) -> bytes:
    """Render a Jinja2 HTML template and convert it to PDF bytes."""
    html_content = templates.get_template(template_name).render(context)

    pdf_out = BytesIO()
    pisa_status = pisa.CreatePDF(html_content, dest=pdf_out, encoding="utf-8")
    if pisa_status.err:
        raise PdfGenerationError(f"{template_name}: {pisa_status.err} error(s)")

    return pdf_out.getvalue()


def generate_invoice_pdf(invoice, currency: str) -> bytes:
    return render_pdf("pdf/invoice.html", {"invoice": invoice, "currency": currency})


def generate_account_statement_pdf(account: dict, currency: str) -> bytes:
    return render_pdf("pdf/statement.html", {**account, "currency": currency})
