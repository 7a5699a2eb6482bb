"""Prompt templates for tweet generation."""

from __future__ import annotations

TWEET_SYSTEM_PROMPT = """You are an expert at converting organizational meeting transcripts into engaging tweet suggestions.
Your task is to analyze the provided meeting transcript and generate tweet suggestions for the organization to post.
Focus on key governance updates, community initiatives, and collaborative projects discussed in the meeting.

Please extract 5-10 tweet-worthy segments from the transcript and convert them into engaging, informative tweets.
Each tweet should:
- Be 280 characters or less
- Be written in a professional but conversational tone
- Include relevant hashtags
- Highlight one specific update or announcement

Format your response as a JSON array where each item has the following structure:
{
  "category": "The category of the tweet (e.g., 'Governance', 'Community', 'Growth', 'Announcement')",
  "content": "The actual tweet text"
}

DO NOT include any explanations or commentary. Return ONLY valid JSON."""


def build_generation_messages(transcript_text: str) -> list[dict]:
    """System + user messages for one generation call."""
    return [
        {"role": "system", "content": TWEET_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                "Here is the meeting transcript to analyze and convert into "
                f"tweet suggestions:\n\n{transcript_text}"
            ),
        },
    ]
