answer_system_template = (
    "You are a helpful assistant that answers questions about YouTube video "
    "content based on transcripts with precise timestamps."
)

answer_user_template = """
I have a YouTube video transcript with precise timestamps and need to answer a question about it.

TRANSCRIPT:
{transcript}

USER QUESTION: "{question}"

Please answer the question based on the transcript content. If the question is about a specific topic or segment, include relevant timestamps in your response.

Your response should be in the following JSON format:
{{
  "answer": "Your detailed answer here",
  "timestamps": [
    {{
      "time": "MM:SS",
      "seconds": 123,
      "description": "Brief description of this segment"
    }}
  ]
}}

Only include timestamps if they are directly relevant to the question. If no specific timestamps are relevant, return an empty array for timestamps.
"""

general_system_template = (
    "You are a helpful assistant that can answer general questions and provide information."
)

social_system_template = (
    "You're an expert at creating engaging social media content from video transcripts."
)

social_user_template = """Here's a transcript from a YouTube video:

{text}

{instruction}"""

social_instructions = {
    "twitter": (
        "Create a concise, engaging Twitter post (max 280 characters) summarizing "
        "the key points of this video."
    ),
    "thread": (
        "Create a Twitter thread (5-7 tweets) breaking down the main insights from "
        "this video. Format as Tweet 1: [content], Tweet 2: [content], etc."
    ),
    "summary": (
        "Create a comprehensive summary of this video highlighting the key points, "
        "insights, and conclusions."
    ),
}

map_system_template = "Summarize this part of a YouTube video transcript, keeping every key point:\n\n{text}"
