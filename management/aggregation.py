"""Read-side computations over already-fetched rows.

Nothing here touches the database; callers pass in the rows their policy
scope allows and get plain dicts back.
"""
import calendar
from collections import Counter, OrderedDict
from datetime import date as date_cls

from .models import Task


def _minutes(log):
    return log.duration_minutes or 0


def is_overdue(task, today):
    """Due strictly before ``today`` and not completed."""
    return (
        task.end_date is not None
        and task.end_date < today
        and task.status != Task.STATUS_COMPLETED
    )


def dashboard_stats(tasks, project_count, time_logs, today):
    tasks = list(tasks)
    return {
        'total_tasks': len(tasks),
        'in_progress_tasks': sum(1 for t in tasks if t.status == Task.STATUS_IN_PROGRESS),
        'completed_tasks': sum(1 for t in tasks if t.status == Task.STATUS_COMPLETED),
        'overdue_tasks': sum(1 for t in tasks if is_overdue(t, today)),
        'total_projects': project_count,
        'total_time_today': sum(_minutes(log) for log in time_logs if log.date == today),
    }


def task_status_distribution(tasks):
    """Counts per task status, in workflow order, skipping empty statuses."""
    counts = Counter(t.status for t in tasks)
    return [
        {
            'status': status,
            'label': status.replace('_', ' ').upper(),
            'count': counts[status],
        }
        for status, _ in Task.STATUS_CHOICES
        if counts[status]
    ]


def project_progress(projects, tasks):
    """Completed vs. total tasks per project; personal tasks are ignored."""
    totals = Counter()
    completed = Counter()
    for task in tasks:
        if task.project_id is None:
            continue
        totals[task.project_id] += 1
        if task.status == Task.STATUS_COMPLETED:
            completed[task.project_id] += 1

    progress = []
    for project in projects:
        total = totals[project.pk]
        done = completed[project.pk]
        progress.append({
            'project_id': project.pk,
            'name': project.name,
            'completed': done,
            'total': total,
            'ratio': round(done / total, 4) if total else 0.0,
        })
    return progress


def total_hours(time_logs):
    return round(sum(_minutes(log) for log in time_logs) / 60, 1)


def user_productivity(profiles, time_logs):
    """Hours logged and distinct tasks touched, per profile."""
    minutes = Counter()
    task_ids = {}
    for log in time_logs:
        minutes[log.user_id] += _minutes(log)
        task_ids.setdefault(log.user_id, set()).add(log.task_id)

    return [
        {
            'user_id': profile.pk,
            'user': profile.full_name,
            'hours': round(minutes[profile.pk] / 60, 1),
            'tasks': len(task_ids.get(profile.pk, ())),
        }
        for profile in profiles
    ]


def month_bounds(year, month):
    last_day = calendar.monthrange(year, month)[1]
    return date_cls(year, month, 1), date_cls(year, month, last_day)


def calendar_month(tasks, year, month):
    """Bucket tasks by due date into the day cells of one month.

    ``leading_blank_days`` is the weekday of the 1st with Sunday as 0, i.e.
    how many empty cells precede it in a Sunday-first grid.
    """
    first, last = month_bounds(year, month)
    days = OrderedDict(
        (date_cls(year, month, day), []) for day in range(1, last.day + 1)
    )
    for task in tasks:
        if task.end_date is None:
            continue
        if task.end_date in days:
            days[task.end_date].append(task)

    return {
        'year': year,
        'month': month,
        'leading_blank_days': (first.weekday() + 1) % 7,
        'days': days,
    }
