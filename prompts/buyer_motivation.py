"""Buyer motivation — archetype descriptions and emphasis directives.

One description sentence and one directive block per archetype. The directive
block is pasted into the outreach system prompt under BUYER MOTIVATION PROFILE
and tells the writer how to split emphasis: 60% on the recipient's dominant
archetype, 40% spread across the other three, or an even 25% each when no
signal was given.
"""

DREAMER_DESCRIPTION = (
    "This person is driven by growth and transformation: they want to break "
    "through to the next level and their biggest worry is getting stuck or "
    "plateauing."
)

LOVER_DESCRIPTION = (
    "This person is driven by connection and belonging: they value strong "
    "relationships and partnerships and worry about missing out on the people "
    "who matter."
)

SCHOLAR_DESCRIPTION = (
    "This person is driven by understanding and certainty: they want to make "
    "informed, confident decisions and worry most about choosing the wrong "
    "option."
)

BOSS_DESCRIPTION = (
    "This person is driven by achievement and results: they want to hit "
    "specific goals and targets and worry about wasting time or falling short."
)

BALANCED_DESCRIPTION = (
    "This person's motivations are unknown, so the message should appeal "
    "evenly to growth, connection, certainty and results."
)


DREAMER_INSTRUCTIONS = """EMPHASIS SPLIT: 60% Dreamer language, 40% covering the other three motivations.

PRIMARY (60%): TRANSFORMATION & BREAKTHROUGH:
- Frame the offer as the step that takes them to the next level.
- Paint a vivid before/after: where they are now versus what becomes possible.
- Use forward-looking, aspirational words: breakthrough, elevate, unlock, next chapter, transform.
- Address the fear of plateauing directly but gently: show how this keeps momentum going.
- Lead with possibility and vision before logistics.

SECONDARY (40%): BRIEF SUPPORTING NOTES:
- One line on the people and partners they will work with (Lover).
- One credible proof point or specific detail so the vision feels grounded (Scholar).
- One concrete outcome or time-saving benefit (Boss).

AVOID: dry feature lists, heavy statistics up front, or anything that makes the opportunity sound routine."""

LOVER_INSTRUCTIONS = """EMPHASIS SPLIT: 60% Lover language, 40% covering the other three motivations.

PRIMARY (60%): RELATIONSHIPS & COMMUNITY:
- Open with warmth and a genuine, personal connection point.
- Frame the offer as a partnership, not a transaction: "working together", "alongside you", "our shared clients".
- Highlight mutual referrals, trust, collaboration and the community they become part of.
- Address the fear of missing connections: show who they will meet and how the relationship keeps growing.
- Use inclusive language (we, together, partner, team) and a friendly, personal tone.

SECONDARY (40%): BRIEF SUPPORTING NOTES:
- One line on how the partnership helps them grow (Dreamer).
- One proof point such as a testimonial from someone they would know (Scholar).
- One concrete, easy next step with a clear result (Boss).

AVOID: cold, transactional phrasing, hard-sell urgency, or leading with price."""

SCHOLAR_INSTRUCTIONS = """EMPHASIS SPLIT: 60% Scholar language, 40% covering the other three motivations.

PRIMARY (60%): EVIDENCE & INFORMED DECISIONS:
- Lead with credible specifics: numbers, credentials, certifications, track record.
- Explain clearly how it works and why it is the safe, well-researched choice.
- Pre-empt objections and remove risk: insurance, compliance, guarantees, references.
- Address the fear of choosing wrong: offer comparisons, data or a low-risk way to evaluate.
- Keep the tone precise, calm and factual; let the facts persuade.

SECONDARY (40%): BRIEF SUPPORTING NOTES:
- One line on the upside or new possibilities this opens (Dreamer).
- One line on the people behind the service and how you support them (Lover).
- One concrete outcome they can expect (Boss).

AVOID: hype, vague superlatives, or pressure to decide before they have the information."""

BOSS_INSTRUCTIONS = """EMPHASIS SPLIT: 60% Boss language, 40% covering the other three motivations.

PRIMARY (60%): RESULTS & EFFICIENCY:
- Lead with specific, measurable outcomes: time saved, targets hit, results delivered.
- Be direct and concise. Get to the point in the first sentence.
- Emphasise speed, reliability and execution: turn-key, handled, on schedule.
- Address the fear of wasting time: make the next step quick and the payoff obvious.
- Use decisive, action-oriented verbs and a confident tone.

SECONDARY (40%): BRIEF SUPPORTING NOTES:
- One line on how this elevates what they already do (Dreamer).
- One line on the dependable relationship behind the results (Lover).
- One proof point that backs up the outcome claim (Scholar).

AVOID: long storytelling, soft or open-ended asks, or filler that delays the point."""

BALANCED_INSTRUCTIONS = """EMPHASIS SPLIT: balanced, 25% / 25% / 25% / 25% across all four motivations.

No specific motivation is known, so cover each one briefly and evenly:
- 25% Dreamer: one line on growth, new possibilities or taking things to the next level.
- 25% Lover: one line on partnership, trust and the relationship.
- 25% Scholar: one line of credible proof (credentials, numbers, references).
- 25% Boss: one line on concrete results, speed or time saved.

Keep each element short so the message stays readable, and let the chosen tone and channel decide the ordering."""
