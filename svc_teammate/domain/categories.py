from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class CollaborationCategory:
    id: str
    name: str
    description: str
    icon: str
    suggested_skills: List[str] = field(default_factory=list)
    common_goals: List[str] = field(default_factory=list)

    def to_view(self) -> Dict[str, Any]:
        data = asdict(self)
        return {
            "id": data["id"],
            "name": data["name"],
            "description": data["description"],
            "icon": data["icon"],
            "suggestedSkills": data["suggested_skills"],
            "commonGoals": data["common_goals"],
        }


COLLABORATION_CATEGORIES: Dict[str, CollaborationCategory] = {
    c.id: c
    for c in (
        CollaborationCategory(
            id="business",
            name="Business & Entrepreneurship",
            description="Find co-founders, business partners, and startup team members",
            icon="💼",
            suggested_skills=[
                "Business Strategy", "Marketing", "Sales", "Finance", "Operations",
                "Product Management", "Software Development", "Design", "Legal", "HR",
            ],
            common_goals=[
                "Launch MVP", "Raise funding", "Scale operations", "Expand market",
                "Build team", "Develop product", "Establish partnerships",
            ],
        ),
        CollaborationCategory(
            id="academic",
            name="Academic & Research",
            description="Connect with study partners, research collaborators, and academic mentors",
            icon="🎓",
            suggested_skills=[
                "Research Methods", "Statistical Analysis", "Writing", "Presentation",
                "Data Analysis", "Literature Review", "Critical Thinking", "Time Management",
            ],
            common_goals=[
                "Complete coursework", "Publish paper", "Present at conference",
                "Finish thesis", "Apply for grants", "Network with peers",
            ],
        ),
        CollaborationCategory(
            id="travel",
            name="Travel & Adventure",
            description="Find travel companions for adventures, cultural experiences, and explorations",
            icon="✈️",
            suggested_skills=[
                "Languages", "Navigation", "Photography", "Cultural Sensitivity",
                "Budget Management", "Safety Awareness", "Planning", "Adaptability",
            ],
            common_goals=[
                "Explore new destinations", "Learn languages", "Experience cultures",
                "Adventure activities", "Document journey", "Meet locals",
            ],
        ),
        CollaborationCategory(
            id="creative",
            name="Creative Projects",
            description="Collaborate on artistic endeavors, content creation, and creative ventures",
            icon="🎨",
            suggested_skills=[
                "Creativity", "Technical Skills", "Storytelling", "Visual Design",
                "Audio Production", "Video Editing", "Writing", "Project Management",
            ],
            common_goals=[
                "Complete creative project", "Build portfolio", "Gain exposure",
                "Learn new techniques", "Collaborate with others", "Monetize work",
            ],
        ),
        CollaborationCategory(
            id="lifestyle",
            name="Lifestyle & Personal",
            description="Find partners for fitness, hobbies, personal development, and life goals",
            icon="🌱",
            suggested_skills=[
                "Motivation", "Accountability", "Communication", "Empathy",
                "Organization", "Goal Setting", "Time Management", "Flexibility",
            ],
            common_goals=[
                "Improve fitness", "Learn new skills", "Build habits",
                "Achieve goals", "Make friends", "Have fun",
            ],
        ),
        CollaborationCategory(
            id="professional",
            name="Professional Development",
            description="Connect for career growth, skill development, and professional networking",
            icon="📈",
            suggested_skills=[
                "Leadership", "Communication", "Strategic Thinking", "Problem Solving",
                "Industry Knowledge", "Networking", "Mentoring", "Project Management",
            ],
            common_goals=[
                "Advance career", "Learn new skills", "Change industries",
                "Build network", "Find mentorship", "Share knowledge",
            ],
        ),
        CollaborationCategory(
            id="volunteer",
            name="Volunteer & Social Impact",
            description="Join forces for community service, social causes, and making a difference",
            icon="🤝",
            suggested_skills=[
                "Compassion", "Organization", "Communication", "Fundraising",
                "Event Planning", "Social Media", "Grant Writing", "Community Building",
            ],
            common_goals=[
                "Make impact", "Help others", "Build community",
                "Raise awareness", "Organize events", "Support causes",
            ],
        ),
        CollaborationCategory(
            id="sports",
            name="Sports & Fitness",
            description="Find training partners, team members, and competition companions",
            icon="🏃",
            suggested_skills=[
                "Athletic Ability", "Teamwork", "Discipline", "Motivation",
                "Strategy", "Physical Fitness", "Coordination", "Sportsmanship",
            ],
            common_goals=[
                "Improve fitness", "Compete in events", "Learn new sports",
                "Join teams", "Have fun", "Stay active",
            ],
        ),
        CollaborationCategory(
            id="technology",
            name="Technology & Innovation",
            description="Collaborate on tech projects, learn programming, and explore innovation",
            icon="💻",
            suggested_skills=[
                "Programming", "Problem Solving", "System Design", "Testing",
                "Documentation", "Version Control", "Debugging", "Innovation",
            ],
            common_goals=[
                "Build applications", "Learn technologies", "Complete projects",
                "Contribute to open source", "Launch products", "Solve problems",
            ],
        ),
        CollaborationCategory(
            id="learning",
            name="Learning & Education",
            description="Study partners for courses, certifications, and skill development",
            icon="📚",
            suggested_skills=[
                "Teaching", "Patience", "Communication", "Organization",
                "Motivation", "Persistence", "Curiosity", "Adaptability",
            ],
            common_goals=[
                "Master subject", "Pass certification", "Practice skills",
                "Learn together", "Share knowledge", "Stay motivated",
            ],
        ),
    )
}


def list_categories() -> List[CollaborationCategory]:
    return list(COLLABORATION_CATEGORIES.values())


def get_category(category_id: str) -> Optional[CollaborationCategory]:
    return COLLABORATION_CATEGORIES.get((category_id or "").strip().lower())
