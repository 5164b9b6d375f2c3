from dependency_injector import containers, providers
from cache.query_cache import QueryCache
from clients.gpt_client import GPTClient
from clients.supabase_client import SupabaseClient
from ui.chatbot_page import ChatbotPage
from ui.dashboard_page import DashboardPage
from ui.ministry_page import MinistryPage
from ui.session import SessionServices
from utils.async_runner import get_runner
from utils.prompt_utils import load_prompts
from workflows.chatbot_workflow import ChatbotWorkflow
from config.config import SETTINGS


class Container(containers.DeclarativeContainer):
    prompts = load_prompts()
    runner = providers.Callable(get_runner)

    # Clients
    gpt_client_general = providers.Singleton(
        GPTClient,
        model=SETTINGS.openai_model_general,
        temperature=SETTINGS.model_temperature,
    )
    # Supabase keeps the auth session on the client, so one per browser session
    supabase_client = providers.Factory(
        SupabaseClient,
        url=SETTINGS.supabase_url,
        key=SETTINGS.supabase_key,
        correlations_rpc=SETTINGS.correlations_rpc,
    )

    # Per-session state
    session_services = providers.Factory(
        SessionServices,
        supabase_client=supabase_client,
        cache=providers.Factory(QueryCache),
        runner=runner,
        vote_totals_stale_seconds=SETTINGS.vote_totals_stale_seconds,
        user_votes_stale_seconds=SETTINGS.user_votes_stale_seconds,
        trending_limit=SETTINGS.trending_limit,
    )

    # Workflows
    chatbot_workflow = providers.Singleton(
        ChatbotWorkflow,
        gpt_client=gpt_client_general,
        prompts=prompts["chatbot"],
    )

    # UI Pages
    dashboard_page = providers.Singleton(DashboardPage)
    ministry_page = providers.Singleton(MinistryPage)
    chatbot_page = providers.Singleton(ChatbotPage, chatbot_workflow=chatbot_workflow)
