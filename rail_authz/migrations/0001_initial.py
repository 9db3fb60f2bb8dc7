import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Role",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role_id", models.CharField(max_length=150, unique=True)),
                ("name", models.CharField(blank=True, default="", max_length=150)),
                ("description", models.TextField(blank=True, default="")),
                ("is_system_role", models.BooleanField(default=False)),
                ("permissions", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="children",
                        to="rail_authz.role",
                    ),
                ),
            ],
            options={
                "db_table": "rail_authz_role",
                "ordering": ["role_id"],
            },
        ),
        migrations.CreateModel(
            name="UserRoleAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(db_index=True, max_length=150)),
                ("assigned_by", models.CharField(blank=True, default="", max_length=150)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "role",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="rail_authz.role",
                    ),
                ),
            ],
            options={
                "db_table": "rail_authz_user_role",
                "ordering": ["user_id", "role__role_id"],
            },
        ),
        migrations.CreateModel(
            name="ResourcePermission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(max_length=150)),
                ("permission", models.CharField(max_length=150)),
                ("resource_type", models.CharField(max_length=100)),
                ("resource_id", models.CharField(max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "rail_authz_resource_permission",
                "ordering": ["resource_type", "resource_id", "user_id", "permission"],
            },
        ),
        migrations.CreateModel(
            name="ResourceRelationship",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("child_type", models.CharField(max_length=100)),
                ("child_id", models.CharField(max_length=150)),
                ("parent_type", models.CharField(max_length=100)),
                ("parent_id", models.CharField(max_length=150)),
                ("relationship_type", models.CharField(default="belongs_to", max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "rail_authz_resource_relationship",
                "ordering": ["child_type", "child_id"],
            },
        ),
        migrations.AddConstraint(
            model_name="userroleassignment",
            constraint=models.UniqueConstraint(fields=("user_id", "role"), name="rail_authz_unique_user_role"),
        ),
        migrations.AddConstraint(
            model_name="resourcepermission",
            constraint=models.UniqueConstraint(
                fields=("user_id", "permission", "resource_type", "resource_id"),
                name="rail_authz_unique_resource_permission",
            ),
        ),
        migrations.AddIndex(
            model_name="resourcepermission",
            index=models.Index(fields=["user_id", "resource_type", "resource_id"], name="rail_authz_rp_lookup_idx"),
        ),
        migrations.AddConstraint(
            model_name="resourcerelationship",
            constraint=models.UniqueConstraint(fields=("child_type", "child_id"), name="rail_authz_single_parent"),
        ),
    ]
