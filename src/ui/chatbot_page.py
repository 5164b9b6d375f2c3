import streamlit as st
from langchain_core.messages import (
    AIMessage,
    HumanMessage,
)
from ui.Page import Page
from workflows.chatbot_workflow import ChatbotWorkflow


class ChatbotPage(Page):
    """UI for the civic assistant."""

    def __init__(self, chatbot_workflow: ChatbotWorkflow):
        self.chatbot_workflow = chatbot_workflow

    def render(self):
        st.title("Ask the VoiceUp assistant")
        for message in st.session_state.chatbot_messages:
            if isinstance(message, HumanMessage):
                with st.chat_message("user"):
                    st.markdown(message.content)
            elif isinstance(message, AIMessage):
                with st.chat_message("assistant"):
                    st.markdown(message.content)

        if prompt := st.chat_input(
            "Describe a problem or ask a question",
            disabled=st.session_state.chatbot_turn != "human",
        ):
            st.session_state.chatbot_messages.append(HumanMessage(content=prompt))
            st.session_state.chatbot_turn = "ai"
            st.rerun()

        if st.session_state.chatbot_turn == "ai":
            with st.chat_message("assistant"):
                with st.spinner("Thinking...", show_time=True):
                    try:
                        bot_message = self.chatbot_workflow.exchange(
                            st.session_state.chatbot_messages
                        )
                        st.session_state.chatbot_messages.append(bot_message)
                    finally:
                        st.session_state.chatbot_turn = "human"
                        st.rerun()
