"""
Print the admin dashboard figures and, optionally, one exam's score spread.
"""
from django.core.management.base import BaseCommand, CommandError

from examinations.services import ExamService, StatisticsService


class Command(BaseCommand):
    help = 'Show dashboard statistics'

    def add_arguments(self, parser):
        parser.add_argument('--exam', type=int, help='Exam id to summarise')

    def handle(self, *args, **options):
        dashboard = StatisticsService.get_dashboard()

        self.stdout.write(self.style.NOTICE('\nDashboard'))
        self.stdout.write(f"  Exams:     {dashboard['exam_total']:>6}  ({dashboard['change_exam']:+.2f}% vs last week)")
        self.stdout.write(f"  Questions: {dashboard['question_total']:>6}  ({dashboard['change_question']:+.2f}% vs last week)")
        self.stdout.write(f"  Accounts:  {dashboard['account_total']:>6}  ({dashboard['change_account']:+.2f}% vs last week)")
        self.stdout.write(f"  Attempts:  {dashboard['exam_user_total']:>6}  ({dashboard['change_exam_user']:+.2f}% vs last week)")
        daily = ' '.join(str(count) for count in dashboard['exam_user_last_seven_days'])
        self.stdout.write(f'  Finished per day (oldest first): {daily}')

        exam_id = options.get('exam')
        if exam_id is None:
            return

        exam = ExamService.get_exam_by_id(exam_id)
        if exam is None:
            raise CommandError(f'Exam {exam_id} does not exist')

        summary = StatisticsService.get_score_summary(exam)
        self.stdout.write(self.style.NOTICE(f'\nScores for {exam.title}'))
        if summary is None:
            self.stdout.write('  No graded attempts yet')
            return
        self.stdout.write(f"  Graded:  {summary['graded_count']}")
        self.stdout.write(f"  Average: {summary['average_point']}")
        self.stdout.write(f"  Median:  {summary['median_point']}")
        self.stdout.write(f"  Std dev: {summary['std_deviation']}")
        self.stdout.write(f"  Range:   {summary['lowest_point']} - {summary['highest_point']}")
