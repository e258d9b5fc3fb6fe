import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('nodes', '0001_initial'),
        ('teams', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='File',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('file_type', models.CharField(help_text='MIME type declared on upload or guessed from the name', max_length=255)),
                ('size', models.BigIntegerField(help_text='Content size in bytes')),
                ('content', models.TextField(blank=True, default='')),
                ('status', models.CharField(choices=[('pending_confirmation', 'Pending confirmation'), ('pending_approval', 'Pending approval'), ('pending_delete', 'Pending delete'), ('synced', 'Synced'), ('rejected', 'Rejected')], db_index=True, default='pending_confirmation', max_length=32)),
                ('change_type', models.CharField(choices=[('create', 'Create'), ('edit', 'Edit'), ('delete', 'Delete')], default='create', max_length=32)),
                ('previous_content', models.TextField(blank=True, null=True)),
                ('previous_name', models.CharField(blank=True, max_length=255, null=True)),
                ('previous_size', models.BigIntegerField(blank=True, null=True)),
                ('previous_type', models.CharField(blank=True, max_length=255, null=True)),
                ('version', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('last_modified_at', models.DateTimeField(auto_now=True)),
                ('last_modified_by', models.ForeignKey(help_text='Initiator of the current (or last) change', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='modified_files', to=settings.AUTH_USER_MODEL)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='owned_files', to=settings.AUTH_USER_MODEL)),
                ('primary_node', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='primary_files', to='nodes.storagenode')),
                ('replica_nodes', models.ManyToManyField(blank=True, help_text='Backup nodes holding the last approved version', related_name='replica_files', to='nodes.storagenode')),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to='teams.team')),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['-last_modified_at'],
                'indexes': [
                    models.Index(fields=['team', 'status'], name='files_team_status_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('size__gte', 0)), name='files_size_non_negative'),
                ],
            },
        ),
    ]
