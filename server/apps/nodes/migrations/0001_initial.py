import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('teams', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='StorageNode',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120)),
                ('role', models.CharField(choices=[('primary', 'Primary'), ('backup', 'Backup')], max_length=16)),
                ('total_storage', models.BigIntegerField(help_text='Capacity in bytes')),
                ('used_storage', models.BigIntegerField(default=0, help_text='Bytes accounted to files on this node')),
                ('available_storage', models.BigIntegerField(help_text='Bytes still free (total - used)')),
                ('file_count', models.IntegerField(default=0)),
                ('status', models.CharField(choices=[('active', 'Active'), ('offline', 'Offline')], default='active', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='nodes', to='teams.team')),
            ],
            options={
                'verbose_name': 'Storage Node',
                'verbose_name_plural': 'Storage Nodes',
                'ordering': ['team', 'role', 'name'],
                'constraints': [
                    models.UniqueConstraint(fields=('team', 'name'), name='nodes_team_name_unique'),
                    models.UniqueConstraint(condition=models.Q(('role', 'primary')), fields=('team',), name='nodes_team_single_primary'),
                    models.CheckConstraint(condition=models.Q(('used_storage__gte', 0)), name='nodes_used_storage_non_negative'),
                    models.CheckConstraint(condition=models.Q(('available_storage__gte', 0)), name='nodes_available_storage_non_negative'),
                    models.CheckConstraint(condition=models.Q(('file_count__gte', 0)), name='nodes_file_count_non_negative'),
                    models.CheckConstraint(condition=models.Q(('total_storage', models.F('used_storage') + models.F('available_storage'))), name='nodes_storage_balanced'),
                ],
            },
        ),
    ]
