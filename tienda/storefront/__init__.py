"""
Tienda Storefront — Lógica del lado cliente de la tienda.

- catalog: consulta, filtrado, orden y paginación del catálogo
- cart: reconciliación del carrito local con el remoto
- identity: canal de eventos de identidad
- storage: almacenamiento local clave/valor
- shipping: costo y validación de envío
"""
