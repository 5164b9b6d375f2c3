from langchain_openai import ChatOpenAI


class GPTClient:
    def __init__(
        self,
        model: str,
        temperature: float = 1,
        timeout: int = 120,
        max_retries: int = 3,
    ):
        self.llm = ChatOpenAI(
            model=model,
            temperature=temperature,
            timeout=timeout,
            max_retries=max_retries,
        )

    def instance(self) -> ChatOpenAI:
        return self.llm
