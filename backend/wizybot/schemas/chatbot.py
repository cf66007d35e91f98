from pydantic import BaseModel, Field


class ChatbotRequest(BaseModel):
    input: str = Field(
        ...,
        description="User input message for the chatbot",
        examples=["I am looking for a phone"],
    )


class ChatbotResponse(BaseModel):
    response: str = Field(
        ...,
        description="Response message from the chatbot",
        examples=["Here are some options for phones that you might be interested in..."],
    )
