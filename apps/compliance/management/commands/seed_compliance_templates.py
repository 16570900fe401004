from django.core.management.base import BaseCommand
from django.db import transaction

from apps.compliance.models import (
    DAILY, SCOPE_PARTICIPANT, SCOPE_SITE, WEEKLY, ComplianceTemplate, ComplianceTemplateItem,
)

YES_NO_NA = ComplianceTemplateItem.TYPE_YES_NO_NA
NUMBER = ComplianceTemplateItem.TYPE_NUMBER
TEXT = ComplianceTemplateItem.TYPE_TEXT

# (título, guía, tipo de respuesta, crítico)
DATA = [
    {
        "name": "Site Daily Compliance Check",
        "description": "Daily safety and hygiene checks for work sites",
        "scope_type": SCOPE_SITE,
        "frequency": DAILY,
        "items": [
            ("House neat and tidy",
             "Check that all common areas are clean, organized, and free from clutter", YES_NO_NA, True),
            ("Trip hazards checked and cleared",
             "Inspect floors, walkways, and entrances for loose items, cords, or wet surfaces", YES_NO_NA, True),
            ("Exits and pathways clear",
             "Ensure all emergency exits and evacuation pathways are unobstructed", YES_NO_NA, True),
            ("Emergency/evacuation kit present and accessible",
             "Verify the emergency kit is in its designated location and fully stocked", YES_NO_NA, True),
            ("Hazards identified and logged",
             "Record any new hazards identified during the day. Add details in notes.", TEXT, False),
        ],
    },
    {
        "name": "Site Weekly Compliance Check",
        "description": "Weekly safety, emergency preparedness, and maintenance reviews for work sites",
        "scope_type": SCOPE_SITE,
        "frequency": WEEKLY,
        "items": [
            ("Evacuation drill completed",
             "Confirm that a fire/evacuation drill has been conducted this period with all staff and participants",
             YES_NO_NA, True),
            ("Emergency contacts list reviewed and current",
             "Verify all emergency contact details are up to date and accessible to staff", YES_NO_NA, True),
            ("Hazard register reviewed and actions assigned",
             "Review all logged hazards and ensure corrective actions have been assigned with due dates",
             YES_NO_NA, True),
            ("Maintenance issues triaged",
             "Document any maintenance issues identified and priority level. Add details in notes.", TEXT, False),
        ],
    },
    {
        "name": "Participant Weekly Compliance Check",
        "description": "Weekly review of participant safety, documentation, and care plan compliance",
        "scope_type": SCOPE_PARTICIPANT,
        "frequency": WEEKLY,
        "items": [
            ("Incidents for period reviewed and recorded",
             "Enter the number of incidents recorded for this participant during the week. "
             "Include details in notes.", NUMBER, True),
            ("Medication compliance sighted for period",
             "Verify medication administration records (MAR) are complete and signed for all scheduled doses",
             YES_NO_NA, True),
            ("Case note completion confirmed for rostered supports",
             "Check that case notes have been completed for all rostered support shifts this period",
             YES_NO_NA, True),
            ("Care plan review needed flagged",
             "Indicate if the participant's care plan requires review. Add details of concerns in notes.",
             YES_NO_NA, False),
        ],
    },
]


class Command(BaseCommand):
    help = "Crea las plantillas de cumplimiento recurrente por defecto (idempotente)"

    @transaction.atomic
    def handle(self, *args, **opts):
        created_tpl = created_items = 0
        for cfg in DATA:
            tpl, tpl_created = ComplianceTemplate.objects.get_or_create(
                name=cfg["name"],
                scope_type=cfg["scope_type"],
                frequency=cfg["frequency"],
                defaults={"description": cfg["description"]},
            )
            created_tpl += int(tpl_created)
            if not tpl_created:
                self.stdout.write(f"Omitida '{tpl.name}': ya existe")
                continue
            for order, (title, guidance, response_type, critical) in enumerate(cfg["items"], start=1):
                ComplianceTemplateItem.objects.create(
                    template=tpl,
                    title=title,
                    guidance_text=guidance,
                    response_type=response_type,
                    is_critical=critical,
                    sort_order=order,
                )
                created_items += 1
        self.stdout.write(self.style.SUCCESS(
            f"Plantillas nuevas: {created_tpl} | Ítems nuevos: {created_items}"
        ))
