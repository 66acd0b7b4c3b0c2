import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Regulation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.PositiveIntegerField(help_text='e.g., 2021', unique=True)),
                ('name', models.CharField(help_text='e.g., R2021', max_length=100)),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Regulation',
                'verbose_name_plural': 'Regulations',
                'ordering': ['-year'],
            },
        ),
        migrations.CreateModel(
            name='Course',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(help_text='e.g., CS3401', max_length=20, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('credits', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ('course_type', models.CharField(choices=[('Core', 'Core'), ('Elective', 'Elective'), ('NPTEL', 'NPTEL'), ('Lab', 'Lab'), ('Project', 'Project')], default='Core', max_length=10)),
                ('semester', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('regulation', models.PositiveIntegerField(help_text='Regulation year this course belongs to')),
                ('departments', models.JSONField(blank=True, default=list, help_text='Departments whose students may take this course')),
                ('instructors', models.JSONField(blank=True, default=list, help_text='Names of staff who teach this course')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Course',
                'verbose_name_plural': 'Courses',
                'ordering': ['regulation', 'semester', 'code'],
                'indexes': [models.Index(fields=['regulation', 'semester', 'is_active'], name='course_reg_sem_active_idx')],
            },
        ),
    ]
