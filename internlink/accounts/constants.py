FIELDS_OF_INTEREST = [
    ("tech", "Technology"),
    ("design", "Design"),
    ("marketing", "Marketing"),
    ("business", "Business"),
    ("media", "Media & Arts"),
    ("healthcare", "Healthcare"),
    ("finance", "Finance"),
]

COMMON_SKILLS = [
    "JavaScript", "Python", "React", "Node.js", "HTML/CSS", "Java", "C++", "SQL",
    "Figma", "Adobe Creative Suite", "UI/UX Design", "Wireframing", "Prototyping",
    "Social Media Marketing", "Content Creation", "SEO", "Google Analytics", "Email Marketing",
    "Excel", "PowerPoint", "Data Analysis", "Project Management", "Communication",
    "Photography", "Video Editing", "Writing", "Research", "Leadership",
]

WORK_TYPES = [
    ("", "No preference"),
    ("remote", "Remote"),
    ("in-person", "On-site"),
    ("hybrid", "Hybrid"),
]

INDUSTRIES = [
    "Technology", "Healthcare", "Finance", "Education", "Marketing & Advertising",
    "Manufacturing", "Retail", "Consulting", "Non-profit", "Government",
    "Media & Entertainment", "Real Estate", "Transportation", "Energy", "Other",
]

COMPANY_SIZES = [
    "1-10 employees", "11-50 employees", "51-200 employees",
    "201-500 employees", "501-1000 employees", "1000+ employees",
]
