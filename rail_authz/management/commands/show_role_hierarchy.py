import json

from django.core.management.base import BaseCommand

from rail_authz.coordinator import get_coordinator


class Command(BaseCommand):
    help = "Print the role forest with each role's own permissions."

    def add_arguments(self, parser):
        parser.add_argument(
            "--json",
            action="store_true",
            default=False,
            help="Output the hierarchy as JSON.",
        )

    def handle(self, *args, **options):
        forest = get_coordinator().get_role_hierarchy()
        if options.get("json"):
            self.stdout.write(json.dumps([node.to_dict() for node in forest], indent=2))
            return
        if not forest:
            self.stdout.write(self.style.WARNING("No roles defined"))
            return
        for root in forest:
            self._write_node(root, 0)

    def _write_node(self, node, level):
        permissions = ", ".join(sorted(node.role.permission_ids)) or "-"
        self.stdout.write(f"{'  ' * level}{node.role.id} [{permissions}]")
        for child in node.children:
            self._write_node(child, level + 1)
