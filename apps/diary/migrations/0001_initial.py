import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


EMOJI_CHOICES = [('😟', 'Preocupado'), ('😐', 'Neutral'), ('😌', 'Tranquilo'), ('😤', 'Frustrado'), ('💪', 'Motivado')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DiaryQuarter',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('year', models.IntegerField()),
                ('quarter', models.PositiveSmallIntegerField(choices=[(1, 'Q1'), (2, 'Q2'), (3, 'Q3'), (4, 'Q4')])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='diary_quarters', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'diary_quarters',
                'ordering': ['year', 'quarter'],
                'unique_together': {('user', 'year', 'quarter')},
            },
        ),
        migrations.CreateModel(
            name='DiaryNote',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('month_name', models.CharField(choices=[('Enero', 'Enero'), ('Febrero', 'Febrero'), ('Marzo', 'Marzo'), ('Abril', 'Abril'), ('Mayo', 'Mayo'), ('Junio', 'Junio'), ('Julio', 'Julio'), ('Agosto', 'Agosto'), ('Septiembre', 'Septiembre'), ('Octubre', 'Octubre'), ('Noviembre', 'Noviembre'), ('Diciembre', 'Diciembre')], max_length=20)),
                ('emoji', models.CharField(blank=True, choices=EMOJI_CHOICES, max_length=8, null=True)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('content', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('diary_quarter', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notes', to='diary.diaryquarter')),
            ],
            options={
                'db_table': 'diary_notes',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['diary_quarter', 'month_name'], name='diary_notes_quarter_month_idx')],
            },
        ),
        migrations.CreateModel(
            name='QuarterReflection',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('emoji', models.CharField(blank=True, choices=EMOJI_CHOICES, max_length=8, null=True)),
                ('content', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('diary_quarter', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='reflection', to='diary.diaryquarter')),
            ],
            options={
                'db_table': 'quarter_reflections',
            },
        ),
    ]
