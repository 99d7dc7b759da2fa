from edusphere.models.user import User
from edusphere.models.session import (
    LiveSession,
    SessionParticipant,
    ChatMessage,
    ParticipantRole,
)
from edusphere.models.learning import (
    UserProgress,
    UserPreferences,
    UserAchievement,
    SharedContent,
)
from edusphere.models.content import (
    TutorScript,
    CodingProblem,
    ARProblem,
    Story,
    VoiceQuiz,
)
from edusphere.models.subscription import UserSubscription
