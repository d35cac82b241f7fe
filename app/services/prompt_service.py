"""
Prompt Service

Builds the résumé extraction prompt sent to Gemini: a source-specific
intro, the résumé text when we have it, the target JSON schema and the
skill-inference instructions.
"""

from typing import Optional

RESUME_JSON_SCHEMA = """
{
  "name": "Full Name",
  "email": "email@example.com",
  "phone": "phone number",
  "dob": "Date of birth in YYYY-MM-DD format. This is VERY important - carefully look for any DOB, Date of Birth, Birth Date, or text containing 'born on' in the resume. When found, convert to YYYY-MM-DD format (e.g., 1990-05-15). If not found, return null. Do not mistake other dates like graduation or job start dates for DOB.",
  "location": {
    "city": "City name only. Extract just the city from the address, without any house number, street, or zip code. Look for context clues like 'residing in', 'based in', etc.",
    "state": "State or province name only. Extract just the state/province from the address.",
    "country": "Country name only. Extract just the country from the address. Default to 'India' if a country isn't explicitly mentioned but the resume appears to be from India."
  },
  "contactDetails": {
    "address": "address if available",
    "linkedin": "linkedin url if available",
    "github": "github url if available",
    "website": "personal website if available",
    "twitter": "twitter handle if available"
  },
  "socialLinks": ["array of social media links"],
  "experience": [
    {
      "company": "Company Name",
      "position": "Job Title",
      "tenure": "Duration (e.g., Jan 2020 - Dec 2022)",
      "startMonth": "Start month (e.g., January, Jan)",
      "startYear": "Start year (e.g., 2020)",
      "endMonth": "End month if available, or 'Present' if current job",
      "endYear": "End year if available, or current year if current job",
      "isCurrentJob": "true or false based on whether this is their current position",
      "description": "Job description",
      "skills": ["relevant skills used in this role - extract from job description"]
    }
  ],
  "projects": [
    {
      "name": "Project Name",
      "link": "project url if available",
      "description": "project description",
      "skills": ["technologies used"]
    }
  ],
  "skills": [
    "COMPREHENSIVE array of ALL skills - extract from EVERYWHERE in the resume:",
    "1. TECHNICAL SKILLS (for tech professionals):",
    "   - Programming languages, frameworks, libraries, tools",
    "   - Databases, cloud platforms, DevOps tools",
    "   - Software, IDEs, version control systems",
    "2. PROFESSIONAL SKILLS (inferred from work experience):",
    "   - If they 'led a team' → Team Leadership, People Management",
    "   - If they 'managed projects' → Project Management, Planning",
    "   - If they 'presented to clients' → Presentation Skills, Client Relations",
    "   - If they 'analyzed data/reports' → Data Analysis, Analytical Thinking",
    "   - If they 'coordinated with stakeholders' → Stakeholder Management",
    "   - If they 'trained employees' → Training & Development, Mentoring",
    "   - If they 'handled budgets' → Financial Management, Budget Planning",
    "3. DOMAIN-SPECIFIC SKILLS (based on industry/role):",
    "   - Marketing: Campaign Management, SEO, Social Media, Content Creation",
    "   - Sales: Lead Generation, Customer Acquisition, Negotiation",
    "   - Finance: Financial Analysis, Risk Assessment, Compliance",
    "   - HR: Recruitment, Performance Management, Employee Relations",
    "   - Operations: Process Optimization, Supply Chain, Quality Control",
    "4. SOFT SKILLS (mentioned or clearly demonstrated):",
    "   - Communication, Problem-solving, Critical Thinking",
    "   - Collaboration, Adaptability, Time Management",
    "   - Customer Service, Attention to Detail, Multi-tasking",
    "5. TOOLS & SOFTWARE (any mentioned):",
    "   - Microsoft Office, CRM systems, ERP software",
    "   - Design tools, Analytics platforms, etc.",
    "BE VERY COMPREHENSIVE - if someone worked in a role, they likely have the core skills for that role even if not explicitly stated"
  ],
  "education": [
    {
      "level": "Education level - classify exactly as one of: '10th', '12th', 'diploma', 'bachelor', 'master', 'phd', 'certificate'",
      "institution": "School/University/College Name",
      "degree": "Degree Name or Program Name",
      "field": "Field of Study or Subject",
      "year": "Graduation/Passing Year as a 4-digit number (e.g., 2020). Look for text like 'graduated', 'completed', 'class of', 'passed', etc.",
      "startYear": "Start year of education if available",
      "endYear": "End/graduation year if available",
      "score": "GPA/Percentage/CGPA if mentioned",
      "board": "For 10th/12th, extract the board name like CBSE, ICSE, State Board, etc."
    }
  ],
  "secondaryEducation": {
    "institution": "10th standard school name",
    "board": "Board name for 10th standard (like CBSE, ICSE, State Board)",
    "year": "Year of passing 10th standard",
    "percentage": "Percentage or grade obtained in 10th"
  },
  "higherSecondaryEducation": {
    "institution": "12th standard school/college name",
    "board": "Board name for 12th standard",
    "stream": "Stream in 12th (like Science, Commerce, Arts)",
    "year": "Year of passing 12th standard",
    "percentage": "Percentage or grade obtained in 12th"
  },
  "certifications": [
    {
      "name": "Certification Name",
      "issuer": "Issuing Organization",
      "date": "Date of Issue"
    }
  ],
  "summary": "A long summary of the resume, including key achievements and career highlights, techniques used, and any notable contributions."
}
"""

SKILL_EXTRACTION_INSTRUCTIONS = """
CRITICAL SKILL EXTRACTION INSTRUCTIONS:
- Extract ALL skills comprehensively - both explicitly mentioned AND inferred from work experience
- For TECHNICAL professionals: Include programming languages, frameworks, tools, databases, cloud platforms, methodologies (Agile, DevOps), system architecture, etc.
- For NON-TECHNICAL professionals: Include soft skills, business skills, industry expertise, client management, sales, marketing, finance, operations, etc.
- ANALYZE job descriptions for implied skills:
  * "managed team" → Team Management, Leadership, People Management
  * "client presentations" → Presentation Skills, Client Relations, Communication
  * "analyzed reports" → Data Analysis, Critical Thinking, Report Writing
  * "coordinated projects" → Project Coordination, Planning, Organization
  * "handled budgets" → Financial Management, Budget Planning
  * "trained staff" → Training & Development, Mentoring, Knowledge Transfer
  * "increased sales" → Sales Skills, Business Development, Performance Optimization
  * "social media campaigns" → Social Media Marketing, Digital Marketing, Content Creation
- Include DOMAIN EXPERTISE based on job titles and industries
- For each role, consider what skills are REQUIRED to perform those duties successfully
- Aim for 20-40 comprehensive skills that truly represent their capabilities
- Be thorough but relevant - quality over quantity, but don't miss obvious skills

Return only the JSON object, no additional text or formatting."""


def _intro(source: str) -> str:
    return f"Extract all information from this resume {source} and format it as JSON with the following structure:"


def build_binary_prompt(is_pdf: bool) -> str:
    """Prompt for a PDF or image that is attached to the request inline."""
    return _intro("PDF" if is_pdf else "image") + RESUME_JSON_SCHEMA + SKILL_EXTRACTION_INSTRUCTIONS


def build_text_prompt(text: str, extraction_method: Optional[str] = None) -> str:
    """
    Prompt embedding résumé text.

    ``extraction_method`` is set for Word documents so the model knows the
    text came from a lossy conversion.
    """
    if extraction_method:
        source = f"document ({extraction_method} extraction from DOCX/DOC format)"
    else:
        source = "text"
    return (
        f"{_intro(source)}\n\nResume content:\n{text}\n\n"
        + RESUME_JSON_SCHEMA
        + SKILL_EXTRACTION_INSTRUCTIONS
    )
