"""Install the default sales and dispatch commission rule sets."""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from commissions.defaults import DEFAULT_RULE_SETS
from commissions.models import CommissionRuleSet
from commissions.services import create_rule_set
from organizations.models import Organization


class Command(BaseCommand):
    help = "Install the default sales and dispatch commission rule sets for an organization."

    def add_arguments(self, parser):
        parser.add_argument(
            "--organization",
            required=True,
            help="Organization code.",
        )
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Install a new version even when an active rule set already exists.",
        )

    def handle(self, *args, **options):
        code = options["organization"].strip()
        organization = Organization.objects.filter(code=code).first()
        if organization is None:
            raise CommandError(f"Unknown organization code: {code}")

        for commission_type, tiers in DEFAULT_RULE_SETS.items():
            has_active = CommissionRuleSet.objects.filter(
                organization=organization,
                type=commission_type,
                is_active=True,
            ).exists()
            if has_active and not options["replace"]:
                self.stdout.write(f"[SKIP] {commission_type}: active rule set already present")
                continue

            rule_set = create_rule_set(
                organization,
                commission_type,
                [dict(tier) for tier in tiers],
                name=f"Default {commission_type} rules",
            )
            self.stdout.write(
                self.style.SUCCESS(
                    f"[CREATE] {commission_type}: v{rule_set.version} with {len(tiers)} tiers"
                )
            )
