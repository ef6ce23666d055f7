"""
Rendu HTML du rapport d'intervention.
Le document est autonome (styles inline) : il est servi tel quel par l'admin
et envoyé à Gotenberg pour la conversion PDF.
"""

from html import escape

from portal_maintenance.models.intervention import CONTROL_TYPES_BY_CATEGORY, Intervention
from portal_maintenance.services.translation_service import translate

_RESULT_STYLES = {
    True: ("result.pass", "#1e8e3e"),
    False: ("result.fail", "#d93025"),
    None: ("result.not_inspected", "#5f6368"),
}


def _result_cell(result) -> str:
    key, color = _RESULT_STYLES[result]
    return f'<td style="color: {color}; font-weight: bold;">{escape(translate(key))}</td>'


def _controls_section(intervention: Intervention) -> str:
    """Un tableau par catégorie, dans l'ordre canonique ; les catégories vides sont omises."""
    by_kind = {control.kind: control for control in intervention.controls}
    if not by_kind:
        return f"<p><em>{escape(translate('report.no_controls'))}</em></p>"

    sections = []
    for category, kinds in CONTROL_TYPES_BY_CATEGORY.items():
        rows = [
            f"<tr><td>{escape(translate(f'control.{kind}'))}</td>{_result_cell(by_kind[kind].result)}</tr>"
            for kind in kinds
            if kind in by_kind
        ]
        if not rows:
            continue
        sections.append(
            f"<h3>{escape(translate(f'category.{category}'))}</h3>"
            f'<table style="width: 100%; border-collapse: collapse;">{"".join(rows)}</table>'
        )
    return "\n".join(sections)


def render_intervention_html(intervention: Intervention) -> str:
    """Génère le document HTML complet du rapport d'une intervention."""
    portal = intervention.portal
    summary = intervention.summary or translate("report.no_summary")
    title = translate("report.title", id=intervention.id)

    return f"""<!DOCTYPE html>
<html lang="fr">
  <head>
    <meta charset="utf-8" />
    <title>{escape(title)}</title>
  </head>
  <body style="font-family: Arial, sans-serif; color: #333; margin: 24px;">
    <h1 style="color: #1a73e8;">{escape(title)}</h1>
    <table style="margin-bottom: 24px;">
      <tr><th style="text-align: left;">{escape(translate('report.portal'))}</th><td>{escape(portal.name)}</td></tr>
      <tr><th style="text-align: left;">{escape(translate('report.address'))}</th>
          <td>{escape(portal.address_street)}, {escape(portal.address_zipcode)} {escape(portal.address_city)}</td></tr>
      <tr><th style="text-align: left;">{escape(translate('report.contractor'))}</th><td>{escape(portal.contractor_company)}</td></tr>
      <tr><th style="text-align: left;">{escape(translate('report.date'))}</th><td>{intervention.date.strftime('%d/%m/%Y')}</td></tr>
      <tr><th style="text-align: left;">{escape(translate('report.technician'))}</th><td>{escape(intervention.user_name)}</td></tr>
    </table>
    <h2>{escape(translate('report.summary'))}</h2>
    <p>{escape(summary)}</p>
    {_controls_section(intervention)}
  </body>
</html>
"""
