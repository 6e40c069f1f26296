import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='GrowthAccount',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('account_name', models.CharField(max_length=100)),
                ('broker', models.CharField(blank=True, default='', max_length=100)),
                ('purpose', models.CharField(choices=[('practice', 'Práctica'), ('evaluation', 'Evaluación'), ('funded', 'Fondeada'), ('real', 'Real')], default='practice', max_length=20)),
                ('year', models.IntegerField()),
                ('quarter', models.PositiveSmallIntegerField(choices=[(1, 'Q1'), (2, 'Q2'), (3, 'Q3'), (4, 'Q4')])),
                ('month', models.CharField(choices=[('Enero', 'Enero'), ('Febrero', 'Febrero'), ('Marzo', 'Marzo'), ('Abril', 'Abril'), ('Mayo', 'Mayo'), ('Junio', 'Junio'), ('Julio', 'Julio'), ('Agosto', 'Agosto'), ('Septiembre', 'Septiembre'), ('Octubre', 'Octubre'), ('Noviembre', 'Noviembre'), ('Diciembre', 'Diciembre')], max_length=20)),
                ('initial_capital', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('monthly_gain', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('monthly_target', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('monthly_average', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('cycle', models.CharField(blank=True, choices=[('phase_1', 'Fase 1'), ('phase_2', 'Fase 2'), ('phase_3', 'Fase 3')], max_length=10, null=True)),
                ('status', models.CharField(choices=[('in_progress', 'En progreso'), ('completed', 'Completado'), ('under_review', 'En observación'), ('failed', 'Fallido')], default='in_progress', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='growth_accounts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'growth_accounts',
                'ordering': ['-year', 'quarter'],
                'indexes': [models.Index(fields=['user', 'year', 'quarter'], name='growth_user_year_q_idx')],
            },
        ),
    ]
