# volunteer_hub/utils/serializers.py
"""
JSON shapes for engagement records
"""

from .formatting import format_deadline, format_event_date, format_event_time, format_message_time


def _iso(moment):
    return moment.isoformat() if moment is not None else None


def skill_to_dict(skill):
    return {"id": skill.skill_id, "name": skill.name, "icon": skill.icon}


def event_to_dict(event):
    return {
        "id": event.event_id,
        "title": event.title,
        "description": event.description,
        "category": event.category.value,
        "location_type": event.location_type.value,
        "location_name": event.location_name,
        "start_date": _iso(event.start),
        "end_date": _iso(event.end),
        "registration_deadline": _iso(event.registration_deadline),
        "thumbnail_image": event.thumbnail,
        "capacity": event.capacity,
        "display_date": format_event_date(event.start, event.end),
        "display_time": format_event_time(event.start, event.end),
        "display_deadline": format_deadline(event.registration_deadline),
    }


def registration_to_dict(registration):
    if registration is None:
        return None
    return {
        "event_id": registration.event_id,
        "volunteer_id": registration.volunteer_id,
        "status": registration.status.value,
        "feedback": registration.feedback,
        "star_rating": registration.star_rating,
        "feedback_submitted_at": _iso(registration.feedback_submitted_at),
        "has_feedback": registration.has_feedback,
    }


def task_to_dict(task, skills=None):
    data = {
        "id": task.task_id,
        "event_id": task.event_id,
        "description": task.description,
        "status": task.status.value,
        "feedback": task.feedback,
        "volunteer_id": task.volunteer_id,
        "volunteer_email": task.volunteer_email,
        "required_skills": [skill_to_dict(skill) for skill in task.required_skills],
    }
    if skills is not None:
        data["matching_skills"] = [skill_to_dict(skill) for skill in skills.matching]
        data["missing_skills"] = [skill_to_dict(skill) for skill in skills.missing]
        data["skills_summary"] = skills.summary()
    return data


def message_to_dict(message, now=None):
    data = {
        "id": message.message_id,
        "event_id": message.event_id,
        "volunteer_id": message.volunteer_id,
        "volunteer_name": message.volunteer_name,
        "body": message.body,
        "created_at": _iso(message.created_at),
        "client_ref": message.client_ref,
    }
    if now is not None:
        data["display_time"] = format_message_time(message.created_at, now)
    return data


def profile_to_dict(profile):
    return {
        "id": profile.volunteer_id,
        "email": profile.email,
        "display_name": profile.display_name,
        "full_name": profile.full_name,
        "mobile": profile.mobile,
        "age": profile.age,
        "organization": profile.organization,
        "skill_ids": sorted(profile.skill_ids),
        "work_types": list(profile.work_types),
        "preferred_location": profile.preferred_location,
        "availability_start": _iso(profile.availability_start),
        "availability_end": _iso(profile.availability_end),
        "time_preference": profile.time_preference,
        "days_available": list(profile.days_available),
        "onboarding_step": profile.onboarding_step,
        "onboarding_completed": profile.onboarding_completed,
    }


def discussion_to_dict(preview, now=None):
    data = {
        "id": preview.message_id,
        "event_id": preview.event_id,
        "event_title": preview.event_title,
        "volunteer_name": preview.volunteer_name,
        "preview": preview.preview,
        "created_at": _iso(preview.created_at),
    }
    if now is not None:
        data["display_time"] = format_message_time(preview.created_at, now)
    return data


def batch_to_dict(result):
    return {"success": True, "committed": result.committed_ids, "tasks": [task_to_dict(task) for task in result.committed]}
