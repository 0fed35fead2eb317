"""Built-in workflow templates."""

from __future__ import annotations

from typing import Dict

from .models import StepDefinition, WorkflowConfig

PROJECT_CREATION = WorkflowConfig(
    id="project-creation",
    name="Project Creation Workflow",
    description="Complete workflow for creating and setting up a new social media project",
    steps=[
        StepDefinition(
            id="validate-input",
            name="Validate Input",
            description="Validate project details and configuration",
            estimated_duration=1000,
        ),
        StepDefinition(
            id="analyze-platforms",
            name="Analyze Platforms",
            description="Analyze selected social media platforms",
            estimated_duration=2000,
        ),
        StepDefinition(
            id="generate-calendar",
            name="Generate Calendar",
            description="Create content calendar based on configuration",
            estimated_duration=3000,
        ),
        StepDefinition(
            id="ai-content-generation",
            name="AI Content Generation",
            description="Generate content using AI based on project settings",
            estimated_duration=5000,
        ),
        StepDefinition(
            id="optimize-content",
            name="Optimize Content",
            description="Optimize content for each platform",
            estimated_duration=2000,
        ),
        StepDefinition(
            id="schedule-posts",
            name="Schedule Posts",
            description="Schedule posts for optimal timing",
            estimated_duration=1000,
        ),
        StepDefinition(
            id="validate-schedule",
            name="Validate Schedule",
            description="Validate all scheduled posts",
            estimated_duration=1000,
        ),
    ],
    auto_start=True,
    allow_parallel=False,
    allow_retry=True,
    allow_skip=False,
    notifications=True,
    timeout=30000,
)

# The dependency graph and the optional analytics step are additions to the
# flat step list this template started from. Connections and content are
# checked together, media upload waits for both, and verification and
# analytics fan out after publication.
CONTENT_PUBLISHING = WorkflowConfig(
    id="content-publishing",
    name="Content Publishing Workflow",
    description="Automated workflow for publishing content across platforms",
    steps=[
        StepDefinition(
            id="prepare-content",
            name="Prepare Content",
            description="Prepare content for publishing",
            estimated_duration=1000,
        ),
        StepDefinition(
            id="validate-connections",
            name="Validate Connections",
            description="Validate platform connections",
            estimated_duration=2000,
        ),
        StepDefinition(
            id="upload-media",
            name="Upload Media",
            description="Upload media files to platforms",
            estimated_duration=5000,
            dependencies=["prepare-content", "validate-connections"],
        ),
        StepDefinition(
            id="publish-posts",
            name="Publish Posts",
            description="Publish posts to all platforms",
            estimated_duration=3000,
            dependencies=["upload-media"],
        ),
        StepDefinition(
            id="verify-publication",
            name="Verify Publication",
            description="Verify posts were published successfully",
            estimated_duration=2000,
            dependencies=["publish-posts"],
        ),
        StepDefinition(
            id="update-analytics",
            name="Update Analytics",
            description="Update analytics and performance tracking",
            estimated_duration=1000,
            dependencies=["publish-posts"],
            optional=True,
        ),
    ],
    auto_start=False,
    allow_parallel=True,
    allow_retry=True,
    allow_skip=True,
    notifications=True,
    timeout=45000,
)

PRESETS: Dict[str, WorkflowConfig] = {
    PROJECT_CREATION.id: PROJECT_CREATION,
    CONTENT_PUBLISHING.id: CONTENT_PUBLISHING,
}


def get_preset(preset_id: str) -> WorkflowConfig:
    try:
        return PRESETS[preset_id]
    except KeyError:
        raise KeyError(f"Unknown workflow preset: {preset_id}") from None
