from django.core.management.base import BaseCommand, CommandError

from rail_authz.coordinator import get_coordinator
from rail_authz.exceptions import CircularHierarchyError, HierarchyDepthExceededError


class Command(BaseCommand):
    help = "Check every role's ancestor chain for cycles and excessive depth."

    def add_arguments(self, parser):
        parser.add_argument(
            "--max-depth",
            type=int,
            default=None,
            help="Maximum ancestor chain length (default: role_hierarchy.max_depth).",
        )

    def handle(self, *args, **options):
        try:
            checked = get_coordinator().validate_hierarchy(options.get("max_depth"))
        except CircularHierarchyError as exc:
            raise CommandError(f"Circular role hierarchy: {' -> '.join(exc.chain)}")
        except HierarchyDepthExceededError as exc:
            raise CommandError(
                f"Role '{exc.role_id}' exceeds the maximum depth of {exc.max_depth}"
            )
        self.stdout.write(self.style.SUCCESS(f"Role hierarchy is valid ({checked} roles)"))
