import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0001_initial'),
        ('staff', '0001_initial'),
        ('students', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Enrollment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('instructor', models.CharField(blank=True, max_length=200)),
                ('enrolled_at', models.DateTimeField(auto_now_add=True)),
                ('status', models.CharField(choices=[('enrolled', 'Enrolled'), ('completed', 'Completed'), ('backlog', 'Backlog'), ('dropped', 'Dropped')], db_index=True, default='enrolled', max_length=10)),
                ('original_semester', models.PositiveSmallIntegerField(help_text='Semester the course was first taken in; never changes')),
                ('attempts', models.PositiveSmallIntegerField(default=1)),
                ('cleared_semester', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('grade_earned', models.CharField(blank=True, max_length=5)),
                ('credit_points', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='enrollments', to='academics.course')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to='students.student')),
            ],
            options={
                'verbose_name': 'Enrollment',
                'verbose_name_plural': 'Enrollments',
                'db_table': 'enrollment',
                'ordering': ['original_semester', 'course__code'],
                'indexes': [models.Index(fields=['student', 'original_semester', 'status'], name='enrollment_open_idx')],
                'unique_together': {('student', 'course')},
            },
        ),
        migrations.CreateModel(
            name='GradeRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('semester', models.PositiveSmallIntegerField(help_text='Semester in which this grading occurred')),
                ('original_semester', models.PositiveSmallIntegerField()),
                ('grade_points', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(10)])),
                ('letter_grade', models.CharField(blank=True, editable=False, max_length=5)),
                ('credits', models.PositiveSmallIntegerField(help_text='Course credit weight when graded')),
                ('include_in_gpa', models.BooleanField(default=True)),
                ('attempt', models.PositiveSmallIntegerField(default=1)),
                ('remarks', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='grade_records', to='academics.course')),
                ('entered_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='grades_entered', to='staff.staff')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='grade_records', to='students.student')),
            ],
            options={
                'verbose_name': 'Grade Record',
                'verbose_name_plural': 'Grade Records',
                'db_table': 'grade_record',
                'ordering': ['semester', 'course__code'],
                'unique_together': {('student', 'course')},
            },
        ),
    ]
