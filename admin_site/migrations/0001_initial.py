from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ActivityLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('user_update', 'User Updated'), ('user_delete', 'User Deleted'), ('user_suspend', 'User Suspended'), ('user_activate', 'User Activated'), ('project_create', 'Project Created'), ('project_delete', 'Project Deleted'), ('member_add', 'Project Member Added'), ('member_remove', 'Project Member Removed'), ('task_delete', 'Task Deleted'), ('timelog_approve', 'Time Log Approved'), ('timelog_reject', 'Time Log Rejected'), ('timelog_delete', 'Time Log Deleted')], db_index=True, max_length=50)),
                ('target_type', models.CharField(blank=True, max_length=50)),
                ('target_id', models.IntegerField(blank=True, db_index=True, null=True)),
                ('description', models.TextField()),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('admin_user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='admin_actions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['admin_user', 'created_at'], name='admin_site__admin_u_6a1f0e_idx'),
                    models.Index(fields=['action', 'created_at'], name='admin_site__action_3c9b2d_idx'),
                    models.Index(fields=['target_type', 'target_id'], name='admin_site__target__8e4a71_idx'),
                ],
            },
        ),
    ]
