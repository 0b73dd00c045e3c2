"""Fixed datasets shown when a live collection cannot load its snapshot."""

JOB_LISTINGS = [
    {
        "id": "demo-job-1",
        "employer_id": "demo-org-1",
        "title": "Frontend Developer Intern",
        "description": "Build responsive interfaces with React and work closely with our design team.",
        "requirements": ["Currently enrolled in a CS program", "Portfolio of web projects"],
        "skills_required": ["JavaScript", "React", "HTML/CSS"],
        "location": "San Francisco, CA",
        "job_type": "hybrid",
        "duration": "3 months",
        "stipend": "$2,000/month",
        "is_paid": True,
        "application_deadline": "2026-12-15",
        "status": "active",
        "posted_at": "2026-10-01T09:00:00+00:00",
        "employer_profiles": {"company_name": "TechCorp", "logo_url": None},
    },
    {
        "id": "demo-job-2",
        "employer_id": "demo-org-2",
        "title": "Data Analyst Intern",
        "description": "Turn product data into dashboards and help the team make decisions.",
        "requirements": ["Statistics coursework", "Comfort with spreadsheets"],
        "skills_required": ["Python", "SQL", "Data Analysis"],
        "location": "Remote",
        "job_type": "remote",
        "duration": "6 months",
        "stipend": "$1,800/month",
        "is_paid": True,
        "application_deadline": "2026-11-30",
        "status": "active",
        "posted_at": "2026-09-25T09:00:00+00:00",
        "employer_profiles": {"company_name": "DataSystems", "logo_url": None},
    },
    {
        "id": "demo-job-3",
        "employer_id": "demo-org-3",
        "title": "Marketing Intern",
        "description": "Plan social campaigns and write content for our community channels.",
        "requirements": ["Strong writing skills"],
        "skills_required": ["Social Media Marketing", "Content Creation", "SEO"],
        "location": "New York, NY",
        "job_type": "in-person",
        "duration": "3 months",
        "stipend": None,
        "is_paid": False,
        "application_deadline": "2026-12-01",
        "status": "active",
        "posted_at": "2026-09-20T09:00:00+00:00",
        "employer_profiles": {"company_name": "BrightWave Media", "logo_url": None},
    },
    {
        "id": "demo-job-4",
        "employer_id": "demo-org-1",
        "title": "UX Design Intern",
        "description": "Prototype user journeys and run usability sessions.",
        "requirements": ["Design portfolio"],
        "skills_required": ["Figma", "UI/UX Design", "Prototyping"],
        "location": "Austin, TX",
        "job_type": "hybrid",
        "duration": "4 months",
        "stipend": "$1,500/month",
        "is_paid": True,
        "application_deadline": "2026-12-20",
        "status": "active",
        "posted_at": "2026-09-15T09:00:00+00:00",
        "employer_profiles": {"company_name": "TechCorp", "logo_url": None},
    },
]

INTERN_APPLICATIONS = [
    {
        "id": "demo-app-1",
        "intern_id": "demo-intern-1",
        "job_id": "demo-job-1",
        "status": "applied",
        "cover_letter": "Application submitted through InternLink platform.",
        "notes": None,
        "applied_at": "2026-10-05T10:00:00+00:00",
        "job_listings": JOB_LISTINGS[0],
    },
    {
        "id": "demo-app-2",
        "intern_id": "demo-intern-1",
        "job_id": "demo-job-2",
        "status": "interviewing",
        "cover_letter": "Application submitted through InternLink platform.",
        "notes": "Interview scheduled for next week.",
        "applied_at": "2026-09-28T10:00:00+00:00",
        "job_listings": JOB_LISTINGS[1],
    },
    {
        "id": "demo-app-3",
        "intern_id": "demo-intern-1",
        "job_id": "demo-job-3",
        "status": "rejected",
        "cover_letter": "Application submitted through InternLink platform.",
        "notes": None,
        "applied_at": "2026-09-22T10:00:00+00:00",
        "job_listings": JOB_LISTINGS[2],
    },
]

EMPLOYER_APPLICATIONS = [
    {
        "id": "demo-app-10",
        "intern_id": "demo-intern-1",
        "job_id": "demo-job-1",
        "status": "applied",
        "cover_letter": "Application submitted through InternLink platform.",
        "applied_at": "2026-10-05T10:00:00+00:00",
        "job_listings": {"id": "demo-job-1", "title": "Frontend Developer Intern", "employer_id": "demo-org-1"},
        "users": {"id": "demo-intern-1", "name": "Sarah Johnson", "email": "sarah@example.com", "profile_picture": None},
        "intern_profiles": {"skills": ["React", "JavaScript"], "bio": "CS junior who loves UI work.", "resume_url": None},
    },
    {
        "id": "demo-app-11",
        "intern_id": "demo-intern-2",
        "job_id": "demo-job-1",
        "status": "reviewing",
        "cover_letter": "Application submitted through InternLink platform.",
        "applied_at": "2026-10-03T10:00:00+00:00",
        "job_listings": {"id": "demo-job-1", "title": "Frontend Developer Intern", "employer_id": "demo-org-1"},
        "users": {"id": "demo-intern-2", "name": "Michael Chen", "email": "michael@example.com", "profile_picture": None},
        "intern_profiles": {"skills": ["Python", "SQL"], "bio": "Data-minded builder.", "resume_url": None},
    },
]

MESSAGES = [
    {
        "id": "demo-msg-1",
        "sender_id": "demo-org-1",
        "receiver_id": "demo-intern-1",
        "subject": "Interview invitation",
        "content": "Hi! We'd love to schedule an interview for the Frontend Developer role.",
        "is_read": False,
        "sent_at": "2026-10-06T14:00:00+00:00",
    },
]
