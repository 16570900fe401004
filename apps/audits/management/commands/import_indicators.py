# apps/audits/management/commands/import_indicators.py

from pathlib import Path

import pandas as pd
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.audits.models import AuditTemplate, TemplateIndicator

REQUIRED_COLUMNS = ["indicator_text", "guidance_text"]
OPTIONAL_COLUMNS = ["sort_order"]


# --- lectura ------------------------------------------------------------------

def read_csv(path: Path) -> pd.DataFrame:
    try:
        return pd.read_csv(path, encoding="utf-8-sig")
    except UnicodeDecodeError:
        return pd.read_csv(path, encoding="latin-1")
    except Exception as e:
        raise CommandError(f"Error leyendo {path.name}: {e}")


def read_table(path: Path) -> pd.DataFrame:
    """CSV o Excel según la extensión; columnas normalizadas a minúsculas."""
    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = read_csv(path)
    elif suffix in (".xlsx", ".xlsm"):
        try:
            df = pd.read_excel(path, engine="openpyxl")
        except Exception as e:
            raise CommandError(f"Error leyendo {path.name}: {e}")
    else:
        raise CommandError(f"Formato no soportado: {path.suffix} (usa .csv o .xlsx)")
    df.columns = [str(c).strip().lower() for c in df.columns]
    return df


def normalize(df: pd.DataFrame) -> pd.DataFrame:
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise CommandError(f"Faltan columnas {missing} | columnas encontradas={list(df.columns)}")

    out = df[REQUIRED_COLUMNS + [c for c in OPTIONAL_COLUMNS if c in df.columns]].copy()
    out["indicator_text"] = out["indicator_text"].fillna("").astype(str).str.strip()
    out["guidance_text"] = out["guidance_text"].fillna("").astype(str).str.strip()
    # filas sin texto de indicador no aportan nada
    out = out[out["indicator_text"] != ""].reset_index(drop=True)

    if "sort_order" in out.columns:
        order = pd.to_numeric(out["sort_order"], errors="coerce")
        out["sort_order"] = order.fillna(pd.Series(range(1, len(out) + 1))).astype(int)
    else:
        out["sort_order"] = range(1, len(out) + 1)
    return out.drop_duplicates(subset=["indicator_text"], keep="last")


def upsert_indicators(template: AuditTemplate, df: pd.DataFrame):
    ins = upd = 0
    for row in df.itertuples(index=False):
        _, created = TemplateIndicator.objects.update_or_create(
            template=template,
            indicator_text=row.indicator_text[:500],
            defaults={"guidance_text": row.guidance_text, "sort_order": int(row.sort_order)},
        )
        if created:
            ins += 1
        else:
            upd += 1
    return ins, upd


# --- management command -------------------------------------------------------

class Command(BaseCommand):
    help = "Importa indicadores de una plantilla de auditoría desde CSV/XLSX (indicator_text, guidance_text, sort_order)."

    def add_arguments(self, parser):
        parser.add_argument("template_name", help="Nombre de la plantilla (se crea si no existe)")
        parser.add_argument("path", help="Ruta al archivo .csv o .xlsx")
        parser.add_argument("--description", default="", help="Descripción para una plantilla nueva")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Valida y muestra conteos; revierte la transacción",
        )

    def handle(self, *args, **opts):
        path = Path(opts["path"])
        if not path.is_absolute():
            path = Path(settings.BASE_DIR) / path
        if not path.exists():
            raise CommandError(f"Archivo no encontrado: {path}")

        df = normalize(read_table(path))
        self.stdout.write(self.style.HTTP_INFO(f"{path.name}: {len(df)} indicadores válidos"))
        if df.empty:
            raise CommandError("El archivo no contiene indicadores.")

        with transaction.atomic():
            template, created = AuditTemplate.objects.get_or_create(
                name=opts["template_name"].strip(),
                defaults={"description": opts["description"]},
            )
            ins, upd = upsert_indicators(template, df)
            summary = f"Plantilla '{template.name}' ({'nueva' if created else 'existente'}) → insertados:{ins}, actualizados:{upd}"

            if opts["dry_run"]:
                transaction.set_rollback(True)
                self.stdout.write(self.style.WARNING(f"DRY-RUN: {summary} (sin cambios en BD)"))
                return

        self.stdout.write(self.style.SUCCESS(summary))
