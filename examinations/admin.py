from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from .models import Course, Part, Intake, QuestionType, Question, Choice, Exam, ExamUser, Role, UserProfile


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    verbose_name_plural = 'Profile'
    filter_horizontal = ['roles']


class UserAdmin(BaseUserAdmin):
    inlines = [UserProfileInline]
    list_display = ['username', 'email', 'first_name', 'last_name', 'get_roles', 'get_status', 'is_staff']
    list_filter = ['is_staff', 'is_superuser', 'is_active', 'profile__roles', 'profile__status']

    def get_roles(self, obj):
        return ', '.join(obj.profile.role_names) if hasattr(obj, 'profile') else '-'
    get_roles.short_description = 'Roles'

    def get_status(self, obj):
        return obj.profile.get_status_display() if hasattr(obj, 'profile') else '-'
    get_status.short_description = 'Status'


admin.site.unregister(User)
admin.site.register(User, UserAdmin)


class PartInline(admin.TabularInline):
    model = Part
    extra = 1


class ChoiceInline(admin.TabularInline):
    model = Choice
    extra = 2
    fields = ['choice_text', 'is_corrected']


class ExamUserInline(admin.TabularInline):
    model = ExamUser
    extra = 0
    fields = ['user', 'is_started', 'is_finished', 'remaining_time', 'total_point', 'time_start', 'time_finish']
    readonly_fields = ['time_start', 'time_finish']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'created_at']
    search_fields = ['code', 'name']
    ordering = ['code']
    inlines = [PartInline]


@admin.register(Part)
class PartAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'course']
    list_filter = ['course']
    search_fields = ['name', 'course__code']


@admin.register(Intake)
class IntakeAdmin(admin.ModelAdmin):
    list_display = ['code', 'name']
    search_fields = ['code', 'name']


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name']


@admin.register(QuestionType)
class QuestionTypeAdmin(admin.ModelAdmin):
    list_display = ['type_code', 'description']


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['id', 'part', 'question_type', 'text_preview', 'difficulty_level', 'point', 'status']
    list_filter = ['question_type', 'difficulty_level', 'status', 'part__course']
    search_fields = ['question_text']
    readonly_fields = ['point', 'created_at', 'updated_at']
    inlines = [ChoiceInline]

    def text_preview(self, obj):
        return obj.question_text[:50] + '...' if len(obj.question_text) > 50 else obj.question_text
    text_preview.short_description = 'Question'


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ['title', 'part', 'duration_minutes', 'shuffle', 'canceled', 'begin_exam', 'finish_exam', 'created_at']
    list_filter = ['canceled', 'shuffle', 'part__course']
    search_fields = ['title']
    inlines = [ExamUserInline]
    readonly_fields = ['created_at', 'updated_at']
    fieldsets = (
        (None, {'fields': ('title', 'part', 'canceled')}),
        ('Settings', {'fields': ('duration_minutes', 'shuffle', 'begin_exam', 'finish_exam')}),
        ('Questions', {'fields': ('question_data',)}),
        ('Metadata', {'fields': ('created_by', 'created_at', 'updated_at'), 'classes': ('collapse',)}),
    )


@admin.register(ExamUser)
class ExamUserAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'exam', 'is_started', 'is_finished', 'remaining_time', 'total_point', 'time_finish']
    list_filter = ['is_finished', 'is_started', 'exam']
    search_fields = ['user__username', 'exam__title']
    readonly_fields = ['time_start', 'time_finish']
