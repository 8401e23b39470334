# routes/profile.py
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from api_service import ApiError, MarketplaceApi, handle_api_error
from crud import address as crud_address
from crud import auth as crud_auth
from dependencies import get_api
from services.session import flash
from templating import render
from utils import get_logger, only_digits

logger = get_logger("profile")

router = APIRouter(prefix="/profile", tags=["Profile"])

ADDRESS_FIELDS = ("label", "zip_code", "street", "number", "complement", "neighborhood", "city", "state")


def _redirect(request: Request, message: str, level: str = "success") -> RedirectResponse:
    response = RedirectResponse(url="/profile", status_code=303)
    flash(request, response, message, level)
    return response


def _address_form(
    label: str = Form(""),
    zip_code: str = Form(""),
    street: str = Form(""),
    number: str = Form(""),
    complement: str = Form(""),
    neighborhood: str = Form(""),
    city: str = Form(""),
    state: str = Form(""),
) -> dict:
    return {
        "label": label.strip(),
        "zip_code": only_digits(zip_code),
        "street": street.strip(),
        "number": number.strip(),
        "complement": complement.strip(),
        "neighborhood": neighborhood.strip(),
        "city": city.strip(),
        "state": state.strip().upper(),
    }


def _address_errors(form: dict) -> list:
    errors = []
    if not form["label"]:
        errors.append("De um nome ao endereco (ex: Casa, Trabalho)")
    if not form["zip_code"] or not form["street"] or not form["number"]:
        errors.append("Preencha todos os campos obrigatorios")
    return errors


def _render_form(request: Request, form: dict, address_id: Optional[int] = None, errors=None, status_code: int = 200):
    return render(request, "profile/address_form.html", {
        "title": "Editar Endereco" if address_id else "Novo Endereco",
        "address_id": address_id,
        "form": form,
        "errors": errors or [],
    }, status_code=status_code)


@router.get("", response_class=HTMLResponse)
def profile_page(request: Request, api: MarketplaceApi = Depends(get_api)):
    user = crud_auth.get_current_user(api)
    addresses = crud_address.get_addresses(api)
    return render(request, "profile/index.html", {"title": "Perfil", "user": user, "addresses": addresses})


@router.get("/addresses/new", response_class=HTMLResponse)
def new_address_page(request: Request):
    return _render_form(request, {f: "" for f in ADDRESS_FIELDS})


@router.get("/addresses/{address_id}/edit", response_class=HTMLResponse)
def edit_address_page(request: Request, address_id: int, api: MarketplaceApi = Depends(get_api)):
    address = next((a for a in crud_address.get_addresses(api) if a.id == address_id), None)
    if address is None:
        return _redirect(request, "Endereco nao encontrado", "error")
    form = {f: getattr(address, f) or "" for f in ADDRESS_FIELDS}
    return _render_form(request, form, address_id)


@router.post("/addresses/lookup-cep", response_class=HTMLResponse)
def lookup_cep(
    request: Request,
    address_id: Optional[int] = Form(None),
    form: dict = Depends(_address_form),
    api: MarketplaceApi = Depends(get_api),
):
    """Fills street, neighborhood, city and state from the postal code and re-renders the form."""
    try:
        data = crud_address.search_cep(api, form["zip_code"])
    except ValueError as e:
        return _render_form(request, form, address_id, [str(e)], 400)
    except ApiError as e:
        return _render_form(request, form, address_id, [handle_api_error(e)], 400)
    form.update(
        street=data.get("street") or "",
        neighborhood=data.get("neighborhood") or data.get("district") or "",
        city=data.get("city") or "",
        state=data.get("state") or "",
        complement=data.get("complement") or form["complement"],
    )
    return _render_form(request, form, address_id)


@router.post("/addresses/new")
def create_address(request: Request, form: dict = Depends(_address_form), api: MarketplaceApi = Depends(get_api)):
    errors = _address_errors(form)
    if not errors:
        try:
            crud_address.create_address(api, form)
            return _redirect(request, "Endereco cadastrado com sucesso!")
        except ApiError as e:
            errors = [handle_api_error(e)]
    return _render_form(request, form, None, errors, 400)


@router.post("/addresses/{address_id}/edit")
def update_address(
    request: Request, address_id: int, form: dict = Depends(_address_form), api: MarketplaceApi = Depends(get_api)
):
    errors = _address_errors(form)
    if not errors:
        try:
            crud_address.update_address(api, address_id, form)
            return _redirect(request, "Endereco atualizado com sucesso!")
        except ApiError as e:
            errors = [handle_api_error(e)]
    return _render_form(request, form, address_id, errors, 400)


@router.post("/addresses/{address_id}/delete")
def delete_address(request: Request, address_id: int, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_address.delete_address(api, address_id)
    except ApiError as e:
        return _redirect(request, handle_api_error(e), "error")
    return _redirect(request, "Endereco excluido com sucesso!")


@router.post("/addresses/{address_id}/default")
def set_default_address(request: Request, address_id: int, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_address.set_default_address(api, address_id)
    except ApiError as e:
        return _redirect(request, handle_api_error(e), "error")
    return _redirect(request, "Endereco padrao atualizado!")
