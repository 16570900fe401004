from django.core.management.base import BaseCommand
from django.db import transaction

from apps.audits.models import DocumentChecklistItem, DocumentChecklistTemplate

# El sufijo de la clave define la sección: _H higiene, _I implementación, _C crítico
DATA = {
    "POLICY": {
        "name": "Policy Document Checklist",
        "description": "Review checklist for organisational policy documents",
        "items": [
            ("POL_H1", "Document has a clear title and version number"),
            ("POL_H2", "Document date is within review period (typically 2 years)"),
            ("POL_H3", "Approval signature or authorisation present"),
            ("POL_H4", "Document is branded/on letterhead"),
            ("POL_I1", "Policy scope and purpose clearly defined"),
            ("POL_I2", "Roles and responsibilities assigned"),
            ("POL_I3", "References relevant legislation or standards"),
            ("POL_I4", "Review schedule documented"),
            ("POL_C1", "Content aligns with NDIS Practice Standards"),
            ("POL_C2", "No conflicting or outdated information"),
        ],
    },
    "PROCEDURE": {
        "name": "Procedure Document Checklist",
        "description": "Review checklist for operational procedure documents",
        "items": [
            ("PROC_H1", "Document has clear title and version"),
            ("PROC_H2", "Date is current (within review period)"),
            ("PROC_H3", "Author/owner identified"),
            ("PROC_I1", "Step-by-step instructions provided"),
            ("PROC_I2", "Responsible parties for each step identified"),
            ("PROC_I3", "Links to related policies or forms"),
            ("PROC_I4", "Escalation pathway defined where applicable"),
            ("PROC_C1", "Procedure aligns with parent policy"),
            ("PROC_C2", "Critical safety steps clearly identified"),
        ],
    },
    "TRAINING_RECORD": {
        "name": "Training Record Checklist",
        "description": "Review checklist for staff training and certification records",
        "items": [
            ("TRN_H1", "Staff member name clearly identified"),
            ("TRN_H2", "Training date recorded"),
            ("TRN_H3", "Training provider/organisation named"),
            ("TRN_I1", "Training topic/module specified"),
            ("TRN_I2", "Completion evidence (certificate, sign-off)"),
            ("TRN_I3", "Expiry date noted if applicable"),
            ("TRN_C1", "Training is current (not expired)"),
            ("TRN_C2", "Training relevant to staff role"),
        ],
    },
    "RISK_ASSESSMENT": {
        "name": "Risk Assessment Checklist",
        "description": "Review checklist for risk assessment documents",
        "items": [
            ("RSK_H1", "Assessment date recorded"),
            ("RSK_H2", "Assessor identified"),
            ("RSK_H3", "Subject/scope of assessment clear"),
            ("RSK_I1", "Risks identified and described"),
            ("RSK_I2", "Risk ratings assigned (likelihood x impact)"),
            ("RSK_I3", "Control measures documented"),
            ("RSK_I4", "Review date scheduled"),
            ("RSK_C1", "High/extreme risks have documented controls"),
            ("RSK_C2", "Assessment is current (reviewed within 12 months)"),
        ],
    },
    "CARE_PLAN": {
        "name": "Care/Support Plan Checklist",
        "description": "Review checklist for participant care and support plans",
        "items": [
            ("CP_H1", "Participant name and identifiers present"),
            ("CP_H2", "Plan date clearly shown"),
            ("CP_H3", "Plan author/coordinator identified"),
            ("CP_I1", "Goals and outcomes documented"),
            ("CP_I2", "Support strategies detailed"),
            ("CP_I3", "Participant preferences noted"),
            ("CP_I4", "Review schedule included"),
            ("CP_C1", "Participant consent/signature obtained"),
            ("CP_C2", "Plan reflects current participant needs"),
            ("CP_C3", "Emergency contacts/protocols documented"),
        ],
    },
    "QUALIFICATION": {
        "name": "Qualification/Credential Checklist",
        "description": "Review checklist for staff qualifications and credentials",
        "items": [
            ("QUAL_H1", "Staff member name matches"),
            ("QUAL_H2", "Issuing institution identified"),
            ("QUAL_H3", "Issue date present"),
            ("QUAL_I1", "Qualification title/type specified"),
            ("QUAL_I2", "Registration/certification number if applicable"),
            ("QUAL_C1", "Qualification is current (not expired)"),
            ("QUAL_C2", "Qualification relevant to role requirements"),
        ],
    },
    "WWCC": {
        "name": "WWCC/Police Check Checklist",
        "description": "Review checklist for Working with Children and police checks",
        "items": [
            ("WW_H1", "Person name matches employee records"),
            ("WW_H2", "Check date recorded"),
            ("WW_H3", "Document is legible"),
            ("WW_I1", "Card/reference number visible"),
            ("WW_I2", "Issuing authority identified"),
            ("WW_C1", "Check is current (not expired)"),
            ("WW_C2", "Status is cleared/valid"),
        ],
    },
    "SERVICE_AGREEMENT": {
        "name": "Service Agreement Checklist",
        "description": "Review checklist for participant service agreements",
        "items": [
            ("SA_H1", "Participant name and details present"),
            ("SA_H2", "Agreement date recorded"),
            ("SA_H3", "Provider details included"),
            ("SA_I1", "Services to be provided clearly described"),
            ("SA_I2", "Pricing/fees documented"),
            ("SA_I3", "Cancellation policy included"),
            ("SA_I4", "Complaints process referenced"),
            ("SA_C1", "Participant signature obtained"),
            ("SA_C2", "Agreement is current (not expired)"),
        ],
    },
    "INCIDENT_REPORT": {
        "name": "Incident Report Checklist",
        "description": "Review checklist for incident and accident reports",
        "items": [
            ("INC_H1", "Incident date and time recorded"),
            ("INC_H2", "Location specified"),
            ("INC_H3", "Reporter identified"),
            ("INC_I1", "Description of what occurred"),
            ("INC_I2", "Persons involved identified"),
            ("INC_I3", "Immediate actions taken documented"),
            ("INC_I4", "Witnesses noted if applicable"),
            ("INC_C1", "Report submitted within required timeframe"),
            ("INC_C2", "Reportable incident notified to NDIS Commission if required"),
        ],
    },
    "COMPLAINT_RECORD": {
        "name": "Complaint Record Checklist",
        "description": "Review checklist for complaint and feedback records",
        "items": [
            ("CMP_H1", "Complaint date received recorded"),
            ("CMP_H2", "Complainant identified (or noted as anonymous)"),
            ("CMP_H3", "Receiving staff member noted"),
            ("CMP_I1", "Nature of complaint described"),
            ("CMP_I2", "Investigation steps documented"),
            ("CMP_I3", "Outcome/resolution recorded"),
            ("CMP_C1", "Acknowledgement provided within required timeframe"),
            ("CMP_C2", "Resolution communicated to complainant"),
        ],
    },
    "CONSENT_FORM": {
        "name": "Consent Form Checklist",
        "description": "Review checklist for participant consent documents",
        "items": [
            ("CON_H1", "Participant name present"),
            ("CON_H2", "Date of consent recorded"),
            ("CON_H3", "Form version/date visible"),
            ("CON_I1", "Purpose of consent clearly stated"),
            ("CON_I2", "Scope of consent defined"),
            ("CON_I3", "Withdrawal process explained"),
            ("CON_C1", "Participant signature obtained"),
            ("CON_C2", "Consent is current and not withdrawn"),
        ],
    },
}

SECTIONS = {
    "H": DocumentChecklistItem.SECTION_HYGIENE,
    "I": DocumentChecklistItem.SECTION_IMPLEMENTATION,
    "C": DocumentChecklistItem.SECTION_CRITICAL,
}


def section_for(item_key: str) -> str:
    return SECTIONS[item_key.rsplit("_", 1)[1][0]]


class Command(BaseCommand):
    help = "Crea las plantillas de checklist documental y sus ítems (idempotente)"

    @transaction.atomic
    def handle(self, *args, **opts):
        created_tpl = created_items = 0
        for document_type, cfg in DATA.items():
            tpl, tpl_created = DocumentChecklistTemplate.objects.get_or_create(
                document_type=document_type,
                defaults={"name": cfg["name"], "description": cfg["description"]},
            )
            created_tpl += int(tpl_created)
            for order, (item_key, text) in enumerate(cfg["items"], start=1):
                section = section_for(item_key)
                _, item_created = DocumentChecklistItem.objects.get_or_create(
                    template=tpl,
                    item_key=item_key,
                    defaults={
                        "item_text": text,
                        "section": section,
                        "is_critical": section == DocumentChecklistItem.SECTION_CRITICAL,
                        "sort_order": order,
                    },
                )
                created_items += int(item_created)
        self.stdout.write(self.style.SUCCESS(
            f"Plantillas nuevas: {created_tpl} | Ítems nuevos: {created_items}"
        ))
